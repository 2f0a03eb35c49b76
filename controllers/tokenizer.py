"""
Tokenizer commands - add, remove and update the tokenizers of an asset.

Each command resolves the asset, checks that its module supports tokenizers,
resolves the requested tokenizer classes, then processes every valid one.
A failing tokenizer never stops the others: failures are collected in the
returned OperationResult.
"""

import logging
from pathlib import Path
from typing import Optional

from downloader.args import DownloadArgs
from models.asset import (
    Asset,
    Assets,
    DEFAULT_TOKENIZER,
    Tokenizer,
    Tokenizers,
    asset_directory,
    options_from_list,
    uniformize_path,
)
from models.download import AssetDownloader
from models.manifest import ManifestStore, upsert_assets
from ui.console import UI
from utils.errors import (
    AssetNotConfiguredError,
    InvalidArgumentsError,
    TokenizerAlreadyExistsError,
    UnsupportedModuleError,
)
from utils.fs import remove_directory
from .result import OperationResult, remove_duplicates

logger = logging.getLogger(__name__)


def resolve_transformers_asset(assets: Assets, name: str) -> Asset:
    """
    Find a configured asset able to hold tokenizers.

    Raises:
        AssetNotConfiguredError: no asset has this name
        UnsupportedModuleError: the asset module has no tokenizers
    """
    asset = assets.map().get(name)
    if asset is None:
        raise AssetNotConfiguredError(name)
    if not asset.supports_tokenizers:
        raise UnsupportedModuleError(asset.name, asset.module)
    return asset


def partition_tokenizers(asset: Asset, names: list[str]) -> tuple[Tokenizers, list[str]]:
    """Split requested classes into configured tokenizers and unknown names."""
    configured = asset.tokenizers.map()
    valid = Tokenizers()
    invalid = []
    for name in names:
        if name in configured:
            valid.append(configured[name])
        else:
            invalid.append(name)
    return valid, invalid


def _invalid_warning(invalid: list[str]) -> str:
    return f"those tokenizers are invalid and will be ignored: {', '.join(invalid)}"


def add_tokenizers(
    store: ManifestStore,
    downloader: AssetDownloader,
    ui: UI,
    args: list[str],
    download_args: Optional[DownloadArgs] = None
) -> OperationResult:
    """
    Download new tokenizers for an asset.

    `args` holds the asset name followed by tokenizer classes. Without
    arguments the asset is picked interactively; without classes the
    default `AutoTokenizer` is added.

    Raises:
        TokenizerAlreadyExistsError: a requested class is already configured,
            nothing is downloaded
    """
    outcome = OperationResult(action="downloaded")

    assets = store.load_assets()
    if not assets:
        raise InvalidArgumentsError("no models to choose from")

    if args:
        asset = resolve_transformers_asset(assets, args[0])
        names = remove_duplicates(args[1:])
    else:
        candidates = assets.transformers().names()
        if not candidates:
            raise InvalidArgumentsError("no transformers models to choose from")
        selected = ui.select("Please select the model to add tokenizers to", candidates)
        if not selected:
            outcome.info = "no model selected"
            return outcome
        asset = resolve_transformers_asset(assets, selected)
        names = []

    if not names:
        names = [DEFAULT_TOKENIZER]

    for name in names:
        if asset.tokenizers.contains(name):
            raise TokenizerAlreadyExistsError(asset.name, name)

    options = options_from_list(download_args.tokenizer_options) if download_args else {}
    for name in names:
        tokenizer = Tokenizer(
            class_name=name,
            path=uniformize_path(asset_directory(asset, downloader.download_dir) / name),
            options=dict(options)
        )
        result = downloader.download_tokenizer(asset, tokenizer, download_args)
        if not result.success:
            outcome.failed.append(name)
            if result.cancelled:
                break
            continue

        upsert_assets(store, [asset])
        outcome.succeeded.append(name)

    outcome.info = "Tokenizers add done"
    return outcome


def remove_tokenizers(
    store: ManifestStore,
    ui: UI,
    args: list[str],
    download_dir: str
) -> OperationResult:
    """
    Remove tokenizers from an asset and from the disk.

    Without tokenizer classes in `args`, the user picks among the configured
    ones. A tokenizer whose files cannot be deleted stays configured and is
    reported as failed.
    """
    outcome = OperationResult(action="removed")

    if not args:
        raise InvalidArgumentsError("enter a model in argument")

    assets = store.load_assets()
    asset = resolve_transformers_asset(assets, args[0])

    names = remove_duplicates([name for name in args[1:] if name != asset.name])
    if not names:
        names = ui.multiselect(
            "Please select the tokenizer(s) to be deleted",
            asset.tokenizers.classes(),
            default_all=False,
            filterable=True
        )

    to_remove, outcome.invalid = partition_tokenizers(asset, names)
    if outcome.invalid:
        outcome.warning = _invalid_warning(outcome.invalid)

    if not to_remove:
        outcome.info = "no selected tokenizers to remove"
        return outcome

    removed = Tokenizers()
    for tokenizer in to_remove:
        path = tokenizer.path or uniformize_path(
            asset_directory(asset, download_dir) / tokenizer.class_name
        )
        try:
            existed = remove_directory(Path(path), stop_at=download_dir)
        except OSError as e:
            logger.warning(f"Failed to remove tokenizer {tokenizer.class_name}: {e}")
            ui.error(f"Could not remove tokenizer '{tokenizer.class_name}': {e}")
            outcome.failed.append(tokenizer.class_name)
            continue

        if not existed:
            ui.warning(
                f"Tokenizer '{tokenizer.class_name}' was not found at '{path}'. "
                "It will be removed from the configuration file."
            )
        removed.append(tokenizer)
        outcome.succeeded.append(tokenizer.class_name)

    if removed:
        asset.tokenizers = asset.tokenizers.difference(removed)
        upsert_assets(store, [asset])

    return outcome


def update_tokenizers(
    store: ManifestStore,
    downloader: AssetDownloader,
    ui: UI,
    args: list[str],
    download_args: Optional[DownloadArgs] = None
) -> OperationResult:
    """
    Download configured tokenizers again.

    The persisted collection is `(current - updated) + updated`, so running
    the same update twice leaves the same tokenizers.
    """
    outcome = OperationResult(action="downloaded")

    if not args:
        raise InvalidArgumentsError("enter a model in argument")

    assets = store.load_assets()
    asset = resolve_transformers_asset(assets, args[0])

    names = remove_duplicates(args[1:])
    if names:
        to_update, outcome.invalid = partition_tokenizers(asset, names)
        if outcome.invalid:
            outcome.warning = _invalid_warning(outcome.invalid)
    elif asset.tokenizers:
        selected = ui.multiselect(
            "Please select the tokenizer(s) to be updated",
            asset.tokenizers.classes(),
            default_all=True,
            filterable=True
        )
        to_update = asset.tokenizers.filter_by_classes(selected)
    else:
        to_update = Tokenizers()

    if not to_update:
        outcome.info = "no selected tokenizers to update"
        return outcome

    current = Tokenizers(asset.tokenizers)
    for tokenizer in to_update:
        result = downloader.download_tokenizer(asset, tokenizer, download_args)
        if result.success:
            outcome.succeeded.append(tokenizer.class_name)
        else:
            outcome.failed.append(tokenizer.class_name)
            if result.cancelled:
                break

    if outcome.succeeded:
        downloaded = asset.tokenizers.map()
        updated = Tokenizers(downloaded[name] for name in outcome.succeeded)
        asset.tokenizers = current.merge(updated)
        upsert_assets(store, [asset])

    outcome.info = "Tokenizers update done"
    return outcome
