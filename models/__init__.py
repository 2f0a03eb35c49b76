"""
Models module for the model asset manager.
Handles configured assets, the manifest, the catalog and downloads.
"""

from .asset import Asset, Assets, Module, Tokenizer, Tokenizers, construct_paths
from .manifest import ManifestStore, YamlManifestStore, upsert_assets, remove_assets
from .catalog import HuggingFaceCatalog
from .download import AssetDownloader, DownloadResult

__all__ = [
    "Asset",
    "Assets",
    "Module",
    "Tokenizer",
    "Tokenizers",
    "construct_paths",
    "ManifestStore",
    "YamlManifestStore",
    "upsert_assets",
    "remove_assets",
    "HuggingFaceCatalog",
    "AssetDownloader",
    "DownloadResult"
]
