"""
Utility modules for the model asset manager.
"""

from .logging import setup_logging, log_duration
from .errors import (
    AssetManagerError,
    InvalidArgumentsError,
    AssetNotConfiguredError,
    UnsupportedModuleError,
    TokenizerAlreadyExistsError,
    DownloaderError,
    DownloaderOutputError,
    DownloadCancelledError,
    ManifestError,
    CatalogError,
    BatchOperationError
)
from .fs import (
    is_existing_path,
    delete_directory_if_empty,
    remove_directory,
    remove_asset_physically,
    list_downloaded_names
)

__all__ = [
    "setup_logging",
    "log_duration",
    "AssetManagerError",
    "InvalidArgumentsError",
    "AssetNotConfiguredError",
    "UnsupportedModuleError",
    "TokenizerAlreadyExistsError",
    "DownloaderError",
    "DownloaderOutputError",
    "DownloadCancelledError",
    "ManifestError",
    "CatalogError",
    "BatchOperationError",
    "is_existing_path",
    "delete_directory_if_empty",
    "remove_directory",
    "remove_asset_physically",
    "list_downloaded_names"
]
