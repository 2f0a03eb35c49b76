"""
Pytest configuration and fixtures.
"""

import os
import sys
import textwrap
from unittest.mock import Mock

import pytest
import yaml

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ["ASSETS_LOG_LEVEL"] = "WARNING"


class FakeUI:
    """Records messages and answers prompts from preset values."""

    def __init__(self, confirm=True, input_value="", select_value="", multiselect_value=None):
        self.confirm_value = confirm
        self.input_value = input_value
        self.select_value = select_value
        self.multiselect_value = multiselect_value
        self.messages = []
        self.prompts = []

    def confirm(self, message):
        self.prompts.append(("confirm", message))
        return self.confirm_value

    def ask_input(self, message):
        self.prompts.append(("input", message))
        return self.input_value

    def select(self, message, options):
        self.prompts.append(("select", message, list(options)))
        return self.select_value

    def multiselect(self, message, options, default_all=False, filterable=True):
        self.prompts.append(("multiselect", message, list(options), default_all))
        if self.multiselect_value is None:
            return list(options) if default_all else []
        return list(self.multiselect_value)

    def info(self, message):
        self.messages.append(("info", message))

    def success(self, message):
        self.messages.append(("success", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def texts(self, level):
        return [text for kind, text in self.messages if kind == level]


@pytest.fixture
def ui():
    """Interactive UI answering yes to confirmations."""
    return FakeUI()


@pytest.fixture
def make_ui():
    """Factory for UIs with other preset answers."""
    return FakeUI


@pytest.fixture
def download_dir(tmp_path):
    path = tmp_path / "models"
    path.mkdir()
    return path


@pytest.fixture
def manifest_path(tmp_path):
    return tmp_path / "config.yaml"


@pytest.fixture
def write_manifest(manifest_path):
    """Write a manifest holding the given model entries."""
    def _write(models, **extra):
        data = dict(extra)
        data["models"] = models
        manifest_path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return manifest_path
    return _write


@pytest.fixture
def store(manifest_path, write_manifest):
    """YAML store on an empty manifest."""
    from models.manifest import YamlManifestStore

    write_manifest([])
    return YamlManifestStore(str(manifest_path))


@pytest.fixture
def script():
    """Download script double; `execute(args, token)` is a Mock."""
    from downloader.result import ScriptResult

    fake = Mock()
    fake.execute.return_value = ScriptResult.absent()
    return fake


@pytest.fixture
def downloader(script, ui, download_dir):
    """AssetDownloader running the script double without signal handlers."""
    from models.download import AssetDownloader

    return AssetDownloader(script, ui, download_dir=str(download_dir), handle_signals=False)


@pytest.fixture
def write_script(tmp_path):
    """Write a Python download script and return its path."""
    def _write(body, name="downloader.py"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_models():
    """Manifest entries for a transformers and a diffusers model."""
    return [
        {
            "name": "bert-base-uncased",
            "module": "transformers",
            "class": "BertModel",
            "path": "models/bert-base-uncased/model",
            "options": {},
            "tokenizers": [
                {"path": "models/bert-base-uncased/BertTokenizer", "class": "BertTokenizer", "options": {}}
            ],
            "pipeline_tag": "fill-mask",
            "source": "hugging_face",
            "add_to_binary": True,
            "is_downloaded": True
        },
        {
            "name": "stabilityai/sdxl-turbo",
            "module": "diffusers",
            "class": "StableDiffusionXLPipeline",
            "path": "models/stabilityai/sdxl-turbo",
            "options": {},
            "tokenizers": [],
            "source": "hugging_face",
            "add_to_binary": True,
            "is_downloaded": True
        }
    ]
