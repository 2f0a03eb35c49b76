"""
Manifest store - loads and saves the configured assets.
"""

import logging
from pathlib import Path
from typing import Iterable, Protocol

import yaml

from utils.errors import ManifestError
from .asset import Asset, Assets

logger = logging.getLogger(__name__)

MODELS_KEY = "models"


class ManifestStore(Protocol):
    """Persistence of the manifest."""

    def load_assets(self) -> Assets:
        ...

    def save_assets(self, assets: Iterable[Asset]) -> None:
        ...


class YamlManifestStore:
    """Manifest kept under the `models` key of a YAML configuration file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            raise ManifestError("Configuration file not found", str(self.path))
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ManifestError(f"Error reading config file: {e}", str(self.path))

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ManifestError("Configuration file must hold a mapping", str(self.path))
        return data

    def load_assets(self) -> Assets:
        """Load the assets of the manifest."""
        entries = self._read().get(MODELS_KEY) or []
        try:
            assets = Assets(Asset.from_dict(entry) for entry in entries)
        except (KeyError, TypeError, AttributeError) as e:
            raise ManifestError(f"Invalid model entry in config file: {e}", str(self.path))

        duplicates = {name for name in assets.names() if assets.names().count(name) > 1}
        if duplicates:
            raise ManifestError(
                f"Duplicated model names in config file: {', '.join(sorted(duplicates))}",
                str(self.path)
            )
        return assets

    def save_assets(self, assets: Iterable[Asset]) -> None:
        """Replace the assets of the manifest, keeping the other keys."""
        data = self._read() if self.path.exists() else {}
        data[MODELS_KEY] = [asset.to_dict() for asset in assets]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ManifestError(f"Error writing to config file: {e}", str(self.path))
        logger.debug(f"Saved {len(data[MODELS_KEY])} model(s) to {self.path}")


def upsert_assets(store: ManifestStore, updated: Iterable[Asset]) -> Assets:
    """
    Persist updated assets: unchanged assets first, updated ones after.

    Returns:
        The saved collection
    """
    updated = Assets(updated)
    assets = Assets(store.load_assets().difference(updated) + updated)
    store.save_assets(assets)
    return assets


def remove_assets(store: ManifestStore, removed: Iterable[Asset]) -> Assets:
    """Persist the manifest without the removed assets."""
    assets = store.load_assets().difference(removed)
    store.save_assets(assets)
    return assets
