"""
Tests for the tidy command.
"""

from downloader.result import ScriptResult
from controllers.tidy import MANUAL_ADD_HINT, missing_assets, tidy
from models.asset import Asset, Assets
from utils.errors import DownloadCancelledError, DownloaderError


def binary_model(name, module="diffusers"):
    return {"name": name, "module": module, "class": "Pipeline", "add_to_binary": True}


def script_failing_for(*failing, exit_code=1):
    def execute(args, token=None):
        if args.model_name in failing:
            raise DownloaderError(f"cannot download {args.model_name}", exit_code=exit_code)
        return ScriptResult.decode(
            f'{{"path": "{args.download_path}/{args.model_name}", "module": "diffusers", "class": "Pipeline"}}'
        )
    return execute


class TestMissingAssets:
    """Tests for missing asset detection."""

    def test_only_binary_assets_missing_on_disk(self, download_dir):
        (download_dir / "present").mkdir()
        assets = Assets([
            Asset(name="present", module="diffusers", add_to_binary=True),
            Asset(name="absent", module="diffusers", add_to_binary=True),
            Asset(name="ignored", module="diffusers", add_to_binary=False),
        ])

        assert missing_assets(assets, str(download_dir)).names() == ["absent"]


class TestTidyDownloads:
    """Tests for downloading missing assets."""

    def test_failure_does_not_stop_batch(self, store, write_manifest, script, downloader, ui):
        write_manifest([binary_model("A"), binary_model("B"), binary_model("C")])
        script.execute.side_effect = script_failing_for("B", exit_code=2)

        report = tidy(store, downloader, ui)

        assert report.materialized == ["A", "C"]
        assert report.failed == ["B"]
        assert report.manual_add == ["B"]
        assert not report.ok
        assert MANUAL_ADD_HINT in ui.texts("info")
        assert script.execute.call_count == 3

        saved = store.load_assets().map()
        assert saved["A"].is_downloaded
        assert saved["C"].is_downloaded
        assert not saved["B"].is_downloaded
        assert saved["A"].path.endswith("/A")

    def test_nothing_missing(self, store, write_manifest, script, downloader, ui, download_dir):
        write_manifest([binary_model("A")])
        (download_dir / "A").mkdir()
        (download_dir / "A" / "weights.bin").write_text("x")

        report = tidy(store, downloader, ui)

        assert report.ok
        assert report.materialized == []
        script.execute.assert_not_called()

    def test_existing_directory_declined(self, store, write_manifest, script, downloader, download_dir, make_ui):
        write_manifest([
            {"name": "org/A", "module": "transformers", "path": "elsewhere/model", "add_to_binary": True}
        ])
        (download_dir / "org" / "A").mkdir(parents=True)
        downloader.ui = ui = make_ui(confirm=False)

        report = tidy(store, downloader, ui)

        assert report.skipped == ["org/A"]
        script.execute.assert_not_called()

    def test_existing_directory_overwritten(self, store, write_manifest, script, downloader, ui, download_dir):
        write_manifest([
            {"name": "org/A", "module": "diffusers", "path": "elsewhere", "add_to_binary": True}
        ])
        (download_dir / "org" / "A").mkdir(parents=True)
        script.execute.side_effect = script_failing_for()

        report = tidy(store, downloader, ui)

        assert report.materialized == ["org/A"]
        args = script.execute.call_args[0][0]
        assert args.overwrite is True

    def test_cancellation_stops_run(self, store, write_manifest, script, downloader, ui, download_dir):
        write_manifest([binary_model("A"), binary_model("B")])
        (download_dir / "org" / "orphan").mkdir(parents=True)
        script.execute.side_effect = DownloadCancelledError()

        report = tidy(store, downloader, ui)

        assert report.cancelled
        assert not report.ok
        assert report.failed == []
        assert report.orphans == []
        assert script.execute.call_count == 1
        assert (download_dir / "org" / "orphan").exists()

    def test_cancellation_keeps_finished_downloads(self, store, write_manifest, script, downloader, ui):
        write_manifest([binary_model("A"), binary_model("B"), binary_model("C")])
        done = script_failing_for()

        def execute(args, token=None):
            if args.model_name == "B":
                raise DownloadCancelledError()
            return done(args, token)

        script.execute.side_effect = execute

        report = tidy(store, downloader, ui)

        assert report.materialized == ["A"]
        assert script.execute.call_count == 2
        assert store.load_assets().map()["A"].is_downloaded


class TestTidyOrphans:
    """Tests for removing downloaded assets missing from the manifest."""

    def test_orphans_removed_on_confirm(self, store, write_manifest, downloader, ui, download_dir):
        write_manifest([])
        (download_dir / "org" / "orphan").mkdir(parents=True)
        (download_dir / "org" / "orphan" / "weights.bin").write_text("x")

        report = tidy(store, downloader, ui)

        assert report.orphans == ["org/orphan"]
        assert report.removed == ["org/orphan"]
        assert not (download_dir / "org").exists()
        assert download_dir.exists()

    def test_orphans_kept_on_decline(self, store, write_manifest, downloader, download_dir, make_ui):
        write_manifest([])
        (download_dir / "org" / "orphan").mkdir(parents=True)
        ui = make_ui(confirm=False)
        downloader.ui = ui

        report = tidy(store, downloader, ui)

        assert report.kept == ["org/orphan"]
        assert report.removed == []
        assert (download_dir / "org" / "orphan").exists()

    def test_configured_assets_are_not_orphans(self, store, write_manifest, downloader, ui, download_dir,
                                               sample_models):
        write_manifest(sample_models)
        (download_dir / "bert-base-uncased" / "model").mkdir(parents=True)
        (download_dir / "stabilityai" / "sdxl-turbo").mkdir(parents=True)

        report = tidy(store, downloader, ui)

        assert report.orphans == []

    def test_single_level_transformers_orphan(self, store, write_manifest, downloader, ui, download_dir):
        write_manifest([])
        (download_dir / "gpt2" / "model").mkdir(parents=True)
        (download_dir / "gpt2" / "model" / "weights.bin").write_text("x")
        (download_dir / "gpt2" / "AutoTokenizer").mkdir()

        report = tidy(store, downloader, ui)

        assert report.orphans == ["gpt2"]
        assert report.removed == ["gpt2"]
        assert list(download_dir.iterdir()) == []
