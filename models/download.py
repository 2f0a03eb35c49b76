"""
Asset Downloader - runs the download script for assets and tokenizers.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from downloader.args import DownloadArgs
from downloader.result import ScriptResult
from downloader.script import DownloaderScript
from downloader.supervisor import CancellableExecution
from ui.console import UI
from utils.errors import (
    AssetManagerError,
    DownloadCancelledError,
    DownloaderError,
)
from utils.logging import log_duration
from .asset import Asset, Tokenizer, options_to_list

logger = logging.getLogger(__name__)

# Exit code of the download script asking for a manual add
EXIT_CODE_MANUAL_ADD = 2


@dataclass
class DownloadResult:
    """Result of an asset download operation."""
    success: bool
    result: Optional[ScriptResult] = None
    error: Optional[AssetManagerError] = None
    exit_code: int = 0
    cancelled: bool = False

    @property
    def requires_manual_add(self) -> bool:
        return self.exit_code == EXIT_CODE_MANUAL_ADD


class AssetDownloader:
    """Downloads assets and tokenizers through the download script."""

    def __init__(
        self,
        script: DownloaderScript,
        ui: UI,
        download_dir: str = "models",
        handle_signals: bool = True
    ):
        self.script = script
        self.ui = ui
        self.download_dir = Path(download_dir)
        self.handle_signals = handle_signals

    def _prepare(self, asset: Asset, args: DownloadArgs) -> DownloadArgs:
        """Fill in what the request does not set from the asset."""
        return replace(
            args,
            download_path=args.download_path or str(self.download_dir),
            model_name=args.model_name or asset.name,
            model_module=args.model_module or asset.module,
            model_class=args.model_class or asset.class_name,
            model_options=args.model_options or tuple(options_to_list(asset.options))
        )

    @staticmethod
    def _describe(args: DownloadArgs) -> str:
        if args.skip_model:
            return f"tokenizer '{args.tokenizer_class}' for model '{args.model_name}'"
        return f"model '{args.model_name}'"

    def execute(self, asset: Asset, args: DownloadArgs) -> DownloadResult:
        """
        Run one supervised download and merge its result into the asset.

        Failures are reported to the user and returned, never raised.
        """
        args = self._prepare(asset, args)
        item = self._describe(args)
        action = "Getting configuration for" if args.only_configuration else "Downloading"
        self.ui.info(f"{action} {item}...")

        execution = CancellableExecution(
            handle_signals=self.handle_signals,
            notify=self.ui.warning
        )
        try:
            with log_duration(
                logger,
                f"{action} {item}",
                model=args.model_name,
                tokenizer=args.tokenizer_class if args.skip_model else None
            ):
                result = execution.run(lambda token: self.script.execute(args, token))
        except DownloadCancelledError as e:
            return DownloadResult(success=False, error=e, exit_code=1, cancelled=True)
        except DownloaderError as e:
            self.ui.error(e.message)
            return DownloadResult(success=False, error=e, exit_code=e.exit_code)
        except AssetManagerError as e:
            self.ui.error(e.message)
            return DownloadResult(success=False, error=e, exit_code=1)

        done = "got configuration for" if args.only_configuration else "downloaded"
        self.ui.success(f"Successfully {done} {item}")

        asset.merge_result(result)
        return DownloadResult(success=True, result=result)

    def download(self, asset: Asset, args: Optional[DownloadArgs] = None) -> DownloadResult:
        """Download an asset, tokenizers included unless skipped."""
        args = args or DownloadArgs()
        outcome = self.execute(asset, args)
        if outcome.success:
            asset.add_to_binary = not args.only_configuration
            asset.is_downloaded = not args.only_configuration
        return outcome

    def get_config(self, asset: Asset, args: Optional[DownloadArgs] = None) -> DownloadResult:
        """Fetch only the configuration of an asset."""
        args = replace(args or DownloadArgs(), only_configuration=True)
        return self.execute(asset, args)

    def download_tokenizer(
        self,
        asset: Asset,
        tokenizer: Tokenizer,
        args: Optional[DownloadArgs] = None
    ) -> DownloadResult:
        """
        Download one tokenizer of an asset.

        On success the tokenizer replaces any configured tokenizer of the
        same class. Options of the tokenizer win over the request ones.
        """
        args = args or DownloadArgs()
        args = replace(
            args,
            model_name=asset.name,
            model_module=asset.module,
            skip_model=True,
            skip_tokenizer=False,
            tokenizer_class=tokenizer.class_name,
            tokenizer_options=tuple(options_to_list(tokenizer.options)) or args.tokenizer_options
        )
        outcome = self.execute(asset, args)
        if outcome.success and not asset.tokenizers.contains(tokenizer.class_name):
            asset.tokenizers.upsert(tokenizer)
        return outcome
