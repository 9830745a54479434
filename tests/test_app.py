"""
Tests for the command line interface.
"""

import json

import pytest

from snapsync import __version__
from snapsync.app import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the CLI from an empty directory with no SNAPSYNC_* variables."""
    for name in ("SNAPSYNC_STORE_ROOT", "SNAPSYNC_LOG_LEVEL", "SNAPSYNC_LOG_DIR", "SNAPSYNC_API_KEY", "SNAPSYNC_PUBLISH_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(path, content: str):
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestCli:
    def test_version(self, workdir, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_check_save_check(self, workdir, capsys):
        doc = _write(workdir / "doc.json", '{"id":"7","name":"Alpha"}')

        main(["check", "--key", "users-7.json", "--input", doc])
        assert "Status: changed" in capsys.readouterr().out

        main(["save", "--key", "users-7.json", "--input", doc])
        assert (workdir / "data" / "users-7.json").exists()

        main(["check", "--key", "users-7.json", "--input", doc])
        assert "Status: unchanged" in capsys.readouterr().out

    def test_check_lists_changed_fields(self, workdir, capsys):
        main(["save", "--key", "a.json", "--input", _write(workdir / "a.json", '{"name":"Alpha"}')])
        capsys.readouterr()

        main(["check", "--key", "a.json", "--input", _write(workdir / "b.json", '{"name":"Beta"}')])

        out = capsys.readouterr().out
        assert "name: 'Alpha' -> 'Beta'" in out

    def test_save_rejects_non_object(self, workdir, capsys):
        doc = _write(workdir / "doc.json", "[1, 2]")
        with pytest.raises(SystemExit) as exc_info:
            main(["save", "--key", "a.json", "--input", doc])
        assert exc_info.value.code == 2
        assert "not a JSON object" in capsys.readouterr().err

    def test_store_option(self, workdir):
        doc = _write(workdir / "doc.json", "{}")
        main(["--store", str(workdir / "elsewhere"), "save", "--key", "a.json", "--input", doc])
        assert (workdir / "elsewhere" / "a.json").exists()

    def test_missing_input(self, workdir):
        with pytest.raises(SystemExit):
            main(["check", "--key", "a.json", "--input", "nope.json"])

    def test_list(self, workdir, capsys):
        main(["list"])
        assert "No snapshots" in capsys.readouterr().out

        main(["save", "--key", "groups/9.json", "--input", _write(workdir / "d.json", "{}")])
        main(["list"])
        assert "groups/9.json" in capsys.readouterr().out

    def test_sync_file_publishes_to_directory(self, workdir, capsys):
        config = workdir / "config.json"
        config.write_text(json.dumps({"publish_dir": str(workdir / "published")}))
        doc = _write(workdir / "about.json", '{"name":"snapsync"}')

        main(["--config", str(config), "sync-file", "--key", "about.json", "--input", doc])
        main(["--config", str(config), "sync-file", "--key", "about.json", "--input", doc])

        out = capsys.readouterr().out
        assert "[changed] about.json" in out
        assert "[no-change] about.json" in out
        assert (workdir / "published" / "about.json").read_bytes() == (workdir / "data" / "about.json").read_bytes()

    def test_sync_without_targets(self, workdir):
        with pytest.raises(SystemExit):
            main(["sync"])

    def test_bad_config(self, workdir):
        config = workdir / "config.json"
        config.write_text("{oops")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "list"])
        assert "Config error" in str(exc_info.value.code)

    def test_publish_failure_is_reported(self, workdir, capsys):
        (workdir / "published").write_bytes(b"not a directory")
        config = workdir / "config.json"
        config.write_text(json.dumps({"publish_dir": str(workdir / "published")}))
        doc = _write(workdir / "about.json", '{"name":"snapsync"}')

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "sync-file", "--key", "about.json", "--input", doc])

        assert exc_info.value.code == 2
        assert "Failed to publish document" in capsys.readouterr().err
