#!/usr/bin/env python3
"""
Model Asset Manager - Main Entry Point

Keep the downloaded models of a project in sync with its configuration file.

Usage:
    # Download missing models and clean up unconfigured ones
    python main.py tidy

    # Add a model from the Hugging Face Hub
    python main.py model add stabilityai/sdxl-turbo

    # Add, update or remove tokenizers of a transformers model
    python main.py tokenizer add bert-base-uncased BertTokenizer
    python main.py tokenizer update bert-base-uncased
    python main.py tokenizer remove bert-base-uncased BertTokenizer
"""

import argparse
import logging
import sys

from config.settings import Settings, get_settings
from controllers import (
    OperationResult,
    TidyReport,
    add_models,
    add_tokenizers,
    remove_all_models,
    remove_models,
    remove_tokenizers,
    tidy,
    update_tokenizers,
)
from downloader.args import DownloadArgs
from downloader.script import DownloaderScript, resolve_python
from models.catalog import HuggingFaceCatalog
from models.download import AssetDownloader
from models.manifest import YamlManifestStore
from ui.console import ConsoleUI
from utils.errors import AssetManagerError
from utils.logging import fields, setup_logging

logger = logging.getLogger("assets")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Model Asset Manager - sync downloaded models with the configuration file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py tidy                                   # Download missing, remove unused
  python main.py model add bert-base-uncased            # Add a model
  python main.py tokenizer add bert-base-uncased        # Add AutoTokenizer
        """
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: WARNING)"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("tidy", help="Add missing and remove unused models")

    model = commands.add_parser("model", help="Model based commands")
    model_commands = model.add_subparsers(dest="action", required=True)
    model_add = model_commands.add_parser("add", help="Add models by name")
    model_add.add_argument("names", nargs="*", help="Model names")
    _add_download_arguments(model_add)
    model_remove = model_commands.add_parser("remove", help="Remove models")
    model_remove.add_argument("names", nargs="*", help="Model names")
    model_remove.add_argument("--all", "-a", action="store_true", help="Remove every model")

    tokenizer = commands.add_parser("tokenizer", help="Tokenizer based commands")
    tokenizer_commands = tokenizer.add_subparsers(dest="action", required=True)
    tokenizer_add = tokenizer_commands.add_parser("add", help="Add tokenizers to a model")
    tokenizer_add.add_argument("args", nargs="*", help="<model name> [<tokenizers>...]")
    tokenizer_add.add_argument("--tokenizer-options", nargs="+", default=[], help="Tokenizer options (key=value)")
    tokenizer_update = tokenizer_commands.add_parser("update", help="Update tokenizers of a model")
    tokenizer_update.add_argument("args", nargs="+", help="<model name> [<tokenizers>...]")
    tokenizer_remove = tokenizer_commands.add_parser("remove", help="Remove tokenizers of a model")
    tokenizer_remove.add_argument("args", nargs="+", help="<model name> [<tokenizers>...]")

    return parser.parse_args(argv)


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    """Download script options exposed on the command line."""
    parser.add_argument("--model-class", default="", help="Model class")
    parser.add_argument("--model-options", nargs="+", default=[], help="Model options (key=value)")
    parser.add_argument("--tokenizer-class", default="", help="Tokenizer class")
    parser.add_argument("--tokenizer-options", nargs="+", default=[], help="Tokenizer options (key=value)")
    parser.add_argument("--skip-tokenizer", action="store_true", help="Do not download the tokenizer")
    parser.add_argument("--only-configuration", action="store_true", help="Only get the configuration")
    parser.add_argument("--overwrite", "-o", action="store_true", help="Overwrite existing files")


def download_args_from(args) -> DownloadArgs:
    return DownloadArgs(
        model_class=getattr(args, "model_class", ""),
        model_options=tuple(getattr(args, "model_options", [])),
        tokenizer_class=getattr(args, "tokenizer_class", ""),
        tokenizer_options=tuple(getattr(args, "tokenizer_options", [])),
        skip_tokenizer=getattr(args, "skip_tokenizer", False),
        only_configuration=getattr(args, "only_configuration", False),
        overwrite=getattr(args, "overwrite", False)
    )


def build_downloader(settings: Settings, ui: ConsoleUI) -> AssetDownloader:
    python_path = resolve_python(settings.python_path, settings.venv_path)
    script = DownloaderScript(python_path, settings.downloader_script)
    return AssetDownloader(script, ui, download_dir=settings.download_dir)


def report_operation(ui: ConsoleUI, result: OperationResult) -> int:
    """Print an operation outcome, returns the exit code."""
    if result.warning:
        ui.warning(result.warning)
    if result.info:
        ui.info(result.info)
    error = result.error
    if error is not None:
        ui.error(error.message)
        ui.error("Operation failed.")
        return 1
    ui.success("Operation succeeded.")
    return 0


def report_tidy(ui: ConsoleUI, report: TidyReport) -> int:
    if report.failed:
        ui.error(f"The following model(s) couldn't be downloaded: {', '.join(report.failed)}")
    if report.removal_failed:
        ui.error(f"The following model(s) couldn't be removed: {', '.join(report.removal_failed)}")
    if report.cancelled:
        ui.error("Tidy was cancelled, remaining models were not processed.")
    if report.ok:
        ui.success("Operation succeeded.")
        return 0
    return 1


def run(args, settings: Settings, ui: ConsoleUI) -> int:
    store = YamlManifestStore(args.config or settings.manifest_path)

    if args.command == "tidy":
        return report_tidy(ui, tidy(store, build_downloader(settings, ui), ui))

    if args.command == "model" and args.action == "add":
        catalog = HuggingFaceCatalog(hf_token=settings.hf_token)
        result = add_models(
            store, build_downloader(settings, ui), catalog, ui, args.names, download_args_from(args)
        )
    elif args.command == "model" and args.action == "remove":
        if args.all:
            result = remove_all_models(store, ui, settings.download_dir)
        else:
            result = remove_models(store, ui, args.names, settings.download_dir)
    elif args.action == "add":
        result = add_tokenizers(
            store, build_downloader(settings, ui), ui, args.args, download_args_from(args)
        )
    elif args.action == "update":
        result = update_tokenizers(store, build_downloader(settings, ui), ui, args.args)
    else:
        result = remove_tokenizers(store, ui, args.args, settings.download_dir)

    return report_operation(ui, result)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    setup_logging(
        level=args.log_level or settings.log_level,
        json_format=settings.json_logs,
        log_file=settings.log_file
    )

    ui = ConsoleUI()
    try:
        return run(args, settings, ui)
    except AssetManagerError as e:
        logger.debug("Command failed", extra=fields(**e.to_dict()))
        ui.error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
