"""
Tests for the model commands and the catalog.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from controllers.model import add_models, remove_all_models, remove_models
from controllers.tidy import MANUAL_ADD_HINT
from models.catalog import HuggingFaceCatalog
from utils.errors import CatalogError, DownloadCancelledError, DownloaderError


def hub_info(model_id, library="transformers", tag="fill-mask"):
    return SimpleNamespace(id=model_id, library_name=library, pipeline_tag=tag, last_modified="2024-01-01")


@pytest.fixture
def catalog():
    api = Mock()
    api.model_info.side_effect = lambda name: hub_info(name)
    return HuggingFaceCatalog(hf_token="test", api=api)


class TestCatalog:
    """Tests for HuggingFaceCatalog."""

    def test_to_asset(self):
        asset = HuggingFaceCatalog.to_asset(hub_info("org/model", library="diffusers", tag="text-to-image"))

        assert asset.name == "org/model"
        assert asset.module == "diffusers"
        assert asset.pipeline_tag == "text-to-image"
        assert asset.source == "hugging_face"
        assert asset.version == "2024-01-01"

    def test_lookup_failure(self):
        api = Mock()
        api.model_info.side_effect = RuntimeError("404 Client Error")
        catalog = HuggingFaceCatalog(api=api)

        with pytest.raises(CatalogError, match="org/missing"):
            catalog.get_model("org/missing")


class TestAddModels:
    """Tests for adding models."""

    def test_add_downloads_and_configures(self, store, catalog, script, downloader, ui, download_dir):
        outcome = add_models(store, downloader, catalog, ui, ["org/bert"])

        assert outcome.succeeded == ["org/bert"]
        saved = store.load_assets().map()["org/bert"]
        assert saved.module == "transformers"
        assert saved.add_to_binary
        assert saved.is_downloaded
        assert saved.path == (download_dir / "org/bert" / "model").as_posix()

        args = script.execute.call_args[0][0]
        assert args.model_name == "org/bert"
        assert args.model_module == "transformers"

    def test_already_configured_ignored(self, store, write_manifest, catalog, script, downloader, ui,
                                        sample_models):
        write_manifest(sample_models)

        outcome = add_models(store, downloader, catalog, ui, ["bert-base-uncased", "org/new"])

        assert outcome.invalid == ["bert-base-uncased"]
        assert outcome.succeeded == ["org/new"]
        assert "already configured" in outcome.warning
        assert store.load_assets().names() == ["bert-base-uncased", "stabilityai/sdxl-turbo", "org/new"]

    def test_catalog_failure_reported(self, store, script, downloader, ui):
        api = Mock()
        api.model_info.side_effect = RuntimeError("offline")
        catalog = HuggingFaceCatalog(api=api)

        outcome = add_models(store, downloader, catalog, ui, ["org/bert"])

        assert outcome.failed == ["org/bert"]
        script.execute.assert_not_called()
        assert outcome.error.message == "the following model(s) couldn't be added: org/bert"

    def test_manual_add_hint(self, store, catalog, script, downloader, ui):
        script.execute.side_effect = DownloaderError("gated model", exit_code=2)

        outcome = add_models(store, downloader, catalog, ui, ["org/gated"])

        assert outcome.failed == ["org/gated"]
        assert MANUAL_ADD_HINT in ui.texts("info")
        assert store.load_assets() == []

    def test_cancellation_stops_batch(self, store, catalog, script, downloader, ui):
        script.execute.side_effect = DownloadCancelledError()

        outcome = add_models(store, downloader, catalog, ui, ["org/first", "org/second"])

        assert outcome.failed == ["org/first"]
        assert script.execute.call_count == 1
        assert store.load_assets() == []

    def test_prompt_when_no_names(self, store, catalog, downloader, make_ui):
        ui = make_ui(input_value="org/asked")
        downloader.ui = ui

        outcome = add_models(store, downloader, catalog, ui, [])

        assert outcome.succeeded == ["org/asked"]


class TestRemoveModels:
    """Tests for removing models."""

    def test_remove_from_disk_and_manifest(self, store, write_manifest, ui, download_dir, sample_models):
        write_manifest(sample_models)
        (download_dir / "stabilityai" / "sdxl-turbo").mkdir(parents=True)

        outcome = remove_models(store, ui, ["stabilityai/sdxl-turbo", "unknown"], str(download_dir))

        assert outcome.succeeded == ["stabilityai/sdxl-turbo"]
        assert outcome.invalid == ["unknown"]
        assert store.load_assets().names() == ["bert-base-uncased"]
        assert not (download_dir / "stabilityai").exists()

    def test_missing_directory_warned(self, store, write_manifest, ui, download_dir, sample_models):
        write_manifest(sample_models)

        outcome = remove_models(store, ui, ["bert-base-uncased"], str(download_dir))

        assert outcome.ok
        assert ui.texts("warning")
        assert store.load_assets().names() == ["stabilityai/sdxl-turbo"]

    def test_remove_all(self, store, write_manifest, ui, download_dir, sample_models):
        write_manifest(sample_models, version="1")

        outcome = remove_all_models(store, ui, str(download_dir))

        assert outcome.succeeded == ["bert-base-uncased", "stabilityai/sdxl-turbo"]
        assert store.load_assets() == []

    def test_interactive_selection(self, store, write_manifest, download_dir, sample_models, make_ui):
        write_manifest(sample_models)
        ui = make_ui(multiselect_value=["bert-base-uncased"])

        remove_models(store, ui, [], str(download_dir))

        assert store.load_assets().names() == ["stabilityai/sdxl-turbo"]
