"""
Asset model - configured models and their tokenizers.

Collections behave as sets keyed by `Asset.name` and `Tokenizer.class_name`
while keeping list order, which is the order written to the manifest.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union
from dataclasses import dataclass, field

from downloader.result import ScriptResult, ScriptTokenizer


HUGGING_FACE = "hugging_face"
DEFAULT_TOKENIZER = "AutoTokenizer"


class Module(str, Enum):
    """Library an asset is loaded with."""
    TRANSFORMERS = "transformers"
    DIFFUSERS = "diffusers"

    @classmethod
    def supports_tokenizers(cls, module: str) -> bool:
        return module == cls.TRANSFORMERS


def uniformize_path(path: Union[str, Path]) -> str:
    """Use forward slashes whatever the platform."""
    return str(path).replace("\\", "/")


def options_to_list(options: Optional[dict]) -> list[str]:
    """Convert an options mapping into `key=value` items, keeping order."""
    if not options:
        return []
    return [f"{key}={value}" for key, value in options.items()]


def options_from_list(items: Iterable[str]) -> dict[str, str]:
    """Parse `key=value` items into an options mapping. Items without `=` map to an empty value."""
    options = {}
    for item in items:
        key, _, value = item.partition("=")
        if key:
            options[key] = value
    return options


@dataclass
class Tokenizer:
    """Tokenizer configured for an asset."""
    class_name: str
    path: str = ""
    options: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Tokenizer":
        return cls(
            class_name=data.get("class", ""),
            path=data.get("path", ""),
            options={str(k): str(v) for k, v in (data.get("options") or {}).items()}
        )

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "class": self.class_name,
            "options": dict(self.options)
        }


class Tokenizers(list):
    """Ordered tokenizer collection keyed by class name."""

    def classes(self) -> list[str]:
        """Tokenizer class names in order."""
        return [tokenizer.class_name for tokenizer in self]

    def map(self) -> dict[str, Tokenizer]:
        """Lookup by class name."""
        return {tokenizer.class_name: tokenizer for tokenizer in self}

    def contains(self, class_name: str) -> bool:
        return any(tokenizer.class_name == class_name for tokenizer in self)

    def difference(self, other: Iterable[Tokenizer]) -> "Tokenizers":
        """Tokenizers of self whose class is absent from `other`."""
        excluded = {tokenizer.class_name for tokenizer in other}
        return Tokenizers(t for t in self if t.class_name not in excluded)

    def union(self, other: Iterable[Tokenizer]) -> "Tokenizers":
        """Tokenizers of self whose class also appears in `other`."""
        included = {tokenizer.class_name for tokenizer in other}
        return Tokenizers(t for t in self if t.class_name in included)

    def filter_by_classes(self, class_names: Iterable[str]) -> "Tokenizers":
        wanted = set(class_names)
        return Tokenizers(t for t in self if t.class_name in wanted)

    def upsert(self, tokenizer: Tokenizer) -> None:
        """Replace the tokenizer with the same class, or append it."""
        for index, current in enumerate(self):
            if current.class_name == tokenizer.class_name:
                self[index] = tokenizer
                return
        self.append(tokenizer)

    def merge(self, updated: Iterable[Tokenizer]) -> "Tokenizers":
        """Return `(self - updated) + updated`."""
        updated = Tokenizers(updated)
        return Tokenizers(self.difference(updated) + updated)


@dataclass
class Asset:
    """Model configured in the manifest."""
    name: str
    module: str = ""
    class_name: str = ""
    path: str = ""
    options: dict[str, str] = field(default_factory=dict)
    tokenizers: Tokenizers = field(default_factory=Tokenizers)
    pipeline_tag: str = ""
    source: str = ""
    version: str = ""
    add_to_binary: bool = False
    is_downloaded: bool = False

    def __post_init__(self):
        if not isinstance(self.tokenizers, Tokenizers):
            self.tokenizers = Tokenizers(self.tokenizers)

    @property
    def supports_tokenizers(self) -> bool:
        return Module.supports_tokenizers(self.module)

    def merge_result(self, result: ScriptResult) -> None:
        """
        Apply a download script result to the asset.

        Model fields are only overwritten when the result is populated. A
        returned tokenizer replaces the configured one with the same class.
        """
        if result.is_populated:
            if result.path:
                self.path = uniformize_path(result.path)
            self.module = result.module
            self.class_name = result.class_name
            self.options = dict(result.options)

        if result.tokenizer is not None and not result.tokenizer.is_empty:
            self.tokenizers.upsert(tokenizer_from_result(result.tokenizer))

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        return cls(
            name=data["name"],
            module=data.get("module", "") or "",
            class_name=data.get("class", "") or "",
            path=data.get("path", "") or "",
            options={str(k): str(v) for k, v in (data.get("options") or {}).items()},
            tokenizers=Tokenizers(Tokenizer.from_dict(t) for t in data.get("tokenizers") or []),
            pipeline_tag=data.get("pipeline_tag", "") or "",
            source=data.get("source", "") or "",
            version=data.get("version", "") or "",
            add_to_binary=bool(data.get("add_to_binary", False)),
            is_downloaded=bool(data.get("is_downloaded", False))
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "module": str(self.module.value if isinstance(self.module, Module) else self.module),
            "class": self.class_name,
            "path": self.path,
            "options": dict(self.options),
            "tokenizers": [tokenizer.to_dict() for tokenizer in self.tokenizers],
            "pipeline_tag": self.pipeline_tag,
            "source": self.source,
            "version": self.version,
            "add_to_binary": self.add_to_binary,
            "is_downloaded": self.is_downloaded
        }


class Assets(list):
    """Ordered asset collection keyed by name."""

    def names(self) -> list[str]:
        return [asset.name for asset in self]

    def map(self) -> dict[str, Asset]:
        """Lookup by asset name."""
        return {asset.name: asset for asset in self}

    def contains(self, name: str) -> bool:
        return any(asset.name == name for asset in self)

    def difference(self, other: Iterable[Asset]) -> "Assets":
        """Assets of self whose name is absent from `other`."""
        excluded = {asset.name for asset in other}
        return Assets(a for a in self if a.name not in excluded)

    def union(self, other: Iterable[Asset]) -> "Assets":
        """Assets of self whose name also appears in `other`."""
        included = {asset.name for asset in other}
        return Assets(a for a in self if a.name in included)

    def filter_by_names(self, names: Iterable[str]) -> "Assets":
        wanted = set(names)
        return Assets(a for a in self if a.name in wanted)

    def transformers(self) -> "Assets":
        """Assets able to hold tokenizers."""
        return Assets(a for a in self if a.supports_tokenizers)

    def to_add_to_binary(self) -> "Assets":
        return Assets(a for a in self if a.add_to_binary)

    def downloaded(self) -> "Assets":
        return Assets(a for a in self if a.is_downloaded)


def tokenizer_from_result(result: ScriptTokenizer) -> Tokenizer:
    """Map a tokenizer returned by the download script."""
    return Tokenizer(
        class_name=result.class_name,
        path=uniformize_path(result.path) if result.path else "",
        options=dict(result.options)
    )


def construct_paths(asset: Asset, download_dir: Union[str, Path]) -> Asset:
    """
    Derive the on-disk locations of an asset and its tokenizers.

    Transformers assets keep the model weights under `<base>/model` and each
    tokenizer under `<base>/<class>`. Other modules use `<base>` directly.
    """
    base_path = Path(download_dir) / asset.name
    model_path = base_path
    if asset.supports_tokenizers:
        model_path = base_path / "model"
        for tokenizer in asset.tokenizers:
            tokenizer.path = uniformize_path(base_path / tokenizer.class_name)
    asset.path = uniformize_path(model_path)
    return asset


def asset_directory(asset: Asset, download_dir: Union[str, Path]) -> Path:
    """Directory holding everything downloaded for an asset."""
    return Path(download_dir) / asset.name
