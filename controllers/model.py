"""
Model commands - add models from the catalog and remove configured models.
"""

import logging
from typing import Optional

from downloader.args import DownloadArgs
from models.asset import Assets, construct_paths
from models.catalog import HuggingFaceCatalog
from models.download import AssetDownloader
from models.manifest import ManifestStore, remove_assets, upsert_assets
from ui.console import UI
from utils.errors import CatalogError
from utils.fs import remove_asset_physically
from .result import OperationResult, remove_duplicates
from .tidy import MANUAL_ADD_HINT

logger = logging.getLogger(__name__)


def add_models(
    store: ManifestStore,
    downloader: AssetDownloader,
    catalog: HuggingFaceCatalog,
    ui: UI,
    names: list[str],
    download_args: Optional[DownloadArgs] = None
) -> OperationResult:
    """Look models up in the catalog, download them and configure them."""
    outcome = OperationResult(action="added", item="model")

    if not names:
        name = ui.ask_input("Enter the name of the model to add")
        names = [name] if name else []
    names = remove_duplicates(names)
    if not names:
        outcome.info = "no models to add"
        return outcome

    assets = store.load_assets()
    configured = [name for name in names if assets.contains(name)]
    if configured:
        outcome.invalid = configured
        outcome.warning = f"those models are already configured and will be ignored: {', '.join(configured)}"

    added = Assets()
    for name in names:
        if name in configured:
            continue

        try:
            asset = catalog.get_model(name)
        except CatalogError as e:
            ui.error(e.message)
            outcome.failed.append(name)
            continue

        construct_paths(asset, str(downloader.download_dir))
        result = downloader.download(asset, download_args)
        if not result.success:
            outcome.failed.append(name)
            if result.cancelled:
                break
            if result.requires_manual_add:
                ui.info(MANUAL_ADD_HINT)
            continue

        added.append(asset)
        outcome.succeeded.append(name)

    if added:
        upsert_assets(store, added)
    return outcome


def remove_models(
    store: ManifestStore,
    ui: UI,
    names: list[str],
    download_dir: str
) -> OperationResult:
    """
    Remove models from the disk and from the manifest.

    Without names the user picks among the configured models. A model whose
    files cannot be deleted stays configured and is reported as failed.
    """
    outcome = OperationResult(action="removed", item="model")
    assets = store.load_assets()

    names = remove_duplicates(names)
    if not names:
        names = ui.multiselect(
            "Please select the model(s) to be deleted",
            assets.names(),
            default_all=False,
            filterable=True
        )
    if not names:
        outcome.info = "no selected models to remove"
        return outcome

    to_remove = assets.filter_by_names(names)
    outcome.invalid = [name for name in names if not assets.contains(name)]
    if outcome.invalid:
        outcome.warning = (
            f"The following models were not found in the configuration file: {', '.join(outcome.invalid)}"
        )

    removed = Assets()
    for asset in to_remove:
        try:
            existed = remove_asset_physically(download_dir, asset.name)
        except OSError as e:
            logger.warning(f"Failed to remove {asset.name}: {e}")
            ui.error(f"Could not remove model '{asset.name}': {e}")
            outcome.failed.append(asset.name)
            continue

        if existed:
            ui.success(f"Removed model {asset.name}")
        else:
            ui.warning(
                f"Model '{asset.name}' was not found in the project directory. It might have been "
                "removed manually or belongs to another project. The model will be removed from "
                "this project's configuration file."
            )
        removed.append(asset)
        outcome.succeeded.append(asset.name)

    if removed:
        remove_assets(store, removed)
    return outcome


def remove_all_models(store: ManifestStore, ui: UI, download_dir: str) -> OperationResult:
    """Remove every configured model."""
    names = store.load_assets().names()
    if not names:
        outcome = OperationResult(action="removed", item="model")
        outcome.info = "no models to remove"
        return outcome
    return remove_models(store, ui, names, download_dir)
