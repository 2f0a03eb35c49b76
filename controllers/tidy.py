"""
Tidy command - reconciles the download directory with the manifest.

Two independent passes:
    1. download the assets flagged for the binary that are missing on disk
    2. offer to delete downloaded assets that are not configured anymore
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from downloader.args import DownloadArgs
from models.asset import Assets, asset_directory, construct_paths
from models.download import AssetDownloader
from models.manifest import ManifestStore, upsert_assets
from ui.console import UI
from utils.fs import is_existing_path, list_downloaded_names, remove_asset_physically
from utils.logging import fields

logger = logging.getLogger(__name__)

MANUAL_ADD_HINT = "Run the 'model add' command to manually add the model."


@dataclass
class TidyReport:
    """What a tidy run did, per asset name."""
    materialized: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    manual_add: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    removal_failed: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.cancelled and not self.failed and not self.removal_failed


def missing_assets(assets: Assets, download_dir: str) -> Assets:
    """Assets flagged for the binary whose files are not on disk."""
    missing = Assets()
    for asset in assets.to_add_to_binary():
        if not asset.path:
            construct_paths(asset, download_dir)
        if not is_existing_path(asset.path):
            missing.append(asset)
    return missing


def download_missing_assets(
    assets: Assets,
    store: ManifestStore,
    downloader: AssetDownloader,
    ui: UI,
    report: TidyReport
) -> None:
    """Download every missing asset, one at a time. A cancellation stops the loop."""
    download_dir = str(downloader.download_dir)
    changed = Assets()

    for asset in missing_assets(assets, download_dir):
        overwrite = False
        directory = asset_directory(asset, download_dir)
        if directory.exists():
            overwrite = ui.confirm(
                f"Model '{asset.name}' already downloaded at '{directory}'. "
                "Do you want to overwrite it?"
            )
            if not overwrite:
                report.skipped.append(asset.name)
                continue

        result = downloader.download(asset, DownloadArgs(overwrite=overwrite))
        if result.cancelled:
            report.cancelled = True
            logger.info("Tidy cancelled", extra=fields(model=asset.name))
            break
        if not result.success:
            asset.is_downloaded = False
            changed.append(asset)
            report.failed.append(asset.name)
            logger.warning(
                f"Failed to download {asset.name}: {result.error}",
                extra=fields(model=asset.name, exit_code=result.exit_code)
            )
            if result.requires_manual_add:
                report.manual_add.append(asset.name)
                ui.info(MANUAL_ADD_HINT)
            continue

        if not asset.path:
            construct_paths(asset, download_dir)
        changed.append(asset)
        report.materialized.append(asset.name)

    if changed:
        upsert_assets(store, changed)


def remove_orphan_assets(
    assets: Assets,
    ui: UI,
    download_dir: str,
    report: TidyReport
) -> None:
    """Offer to delete downloaded assets missing from the manifest."""
    configured = set(assets.names())
    downloaded = list_downloaded_names(download_dir, known=tuple(configured))
    report.orphans = [name for name in downloaded if name not in configured]
    if not report.orphans:
        return

    message = (
        f"These models {', '.join(report.orphans)} weren't found in your configuration file. "
        "Do you wish to delete these models?"
    )
    if not ui.confirm(message):
        # TODO: look kept models up in the catalog and add them to the manifest
        report.kept = list(report.orphans)
        ui.info("Models were kept, add them to the configuration file to manage them.")
        return

    for name in report.orphans:
        try:
            remove_asset_physically(download_dir, name)
        except OSError as e:
            logger.warning(f"Failed to remove {name}: {e}")
            ui.warning(f"Could not remove model '{name}': {e}")
            report.removal_failed.append(name)
            continue
        ui.success(f"Removed model {name}")
        report.removed.append(name)


def tidy(
    store: ManifestStore,
    downloader: AssetDownloader,
    ui: UI
) -> TidyReport:
    """
    Add missing and remove unconfigured models.

    Failures on single assets are reported and do not stop the run. A
    cancelled download ends the run before orphans are looked up. Reading the
    manifest or listing the download directory fails the whole command.
    """
    report = TidyReport()
    assets = store.load_assets()

    download_missing_assets(assets, store, downloader, ui, report)
    if not report.cancelled:
        remove_orphan_assets(assets, ui, str(Path(downloader.download_dir)), report)

    logger.info(
        f"Tidy done: {len(report.materialized)} downloaded, {len(report.failed)} failed, "
        f"{len(report.removed)} removed"
    )
    return report
