"""
Unit tests for the elvdoc command-line tool.

Tests cover:
- pack / validate / show commands and exit codes
- Settings-driven options
- Logging setup
"""

import json
import logging
import tarfile
import tempfile
from pathlib import Path

import json_log_formatter
import pytest

from elvdoc.archive import create_archive
from elvdoc.config import Settings, get_settings
from elvdoc.tools.cli import main, setup_logging

CONFIG = 'version: "1.0.0"\nelvdoc:\n  name: "test-package"\n  pages: 2'


@pytest.fixture
def work_dir():
    """Create temporary working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(work_dir):
    """Directory holding a complete bundle."""
    directory = work_dir / "elvdoc"
    directory.mkdir()
    (directory / "template.html").write_text("<html></html>", encoding="utf-8")
    (directory / "style.css").write_text("body {}", encoding="utf-8")
    (directory / "function.js").write_text("", encoding="utf-8")
    (directory / "config.yaml").write_text(CONFIG, encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Reset cached settings and the root logger around each test."""
    for name in ("ELVDOC_LOG_LEVEL", "ELVDOC_LOG_FORMAT", "ELVDOC_COMPRESSLEVEL", "ELVDOC_SOURCE_MTIME"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    get_settings.cache_clear()


def run(argv):
    """Run the CLI and return its exit code."""
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestPack:
    """Tests for `elvdoc pack`."""

    def test_pack_and_verify(self, work_dir, source_dir, capsys):
        code = run(["pack", str(source_dir), str(work_dir / "doc.elv")])

        assert code == 0
        assert (work_dir / "doc.tar.gz").exists()
        assert "doc.tar.gz" in capsys.readouterr().out

    def test_pack_missing_file(self, work_dir, source_dir, capsys):
        (source_dir / "function.js").unlink()

        code = run(["pack", str(source_dir), str(work_dir / "doc.tar.gz")])

        assert code == 1
        assert "function.js" in capsys.readouterr().out

    def test_pack_invalid_config(self, work_dir, source_dir, capsys):
        (source_dir / "config.yaml").write_text("foo: bar", encoding="utf-8")

        code = run(["pack", str(source_dir), str(work_dir / "doc.tar.gz")])

        assert code == 1
        assert "failed validation" in capsys.readouterr().out

    def test_pack_no_verify(self, work_dir, source_dir):
        (source_dir / "config.yaml").write_text("foo: bar", encoding="utf-8")

        code = run(["pack", "--no-verify", str(source_dir), str(work_dir / "doc.tar.gz")])

        assert code == 0
        assert (work_dir / "doc.tar.gz").exists()

    def test_pack_uses_source_mtime(self, work_dir, source_dir, monkeypatch):
        monkeypatch.setenv("ELVDOC_SOURCE_MTIME", "1600000000")

        run(["pack", str(source_dir), str(work_dir / "doc.tar.gz")])

        with tarfile.open(work_dir / "doc.tar.gz", "r:gz") as tar:
            assert {m.mtime for m in tar.getmembers()} == {1600000000}


class TestValidate:
    """Tests for `elvdoc validate`."""

    def test_all_valid(self, work_dir, capsys):
        path = create_archive(work_dir / "doc.tar.gz", "", "", "", CONFIG)

        code = run(["validate", str(path)])

        assert code == 0
        assert f"{path}: valid" in capsys.readouterr().out

    def test_any_invalid(self, work_dir, capsys):
        good = create_archive(work_dir / "good.tar.gz", "", "", "", CONFIG)
        bad = create_archive(work_dir / "bad.tar.gz", "", "", "", "foo: bar")

        code = run(["validate", str(good), str(bad), str(work_dir / "doc.elv")])

        out = capsys.readouterr().out
        assert code == 1
        assert f"{good}: valid" in out
        assert f"{bad}: invalid" in out
        assert "doc.elv: invalid" in out


class TestShow:
    """Tests for `elvdoc show`."""

    def test_show(self, work_dir, capsys):
        path = create_archive(work_dir / "doc.tar.gz", "<html></html>", "", "", CONFIG)

        code = run(["show", str(path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "version: 1.0.0" in out
        assert '"name": "test-package"' in out
        assert "elvdoc/template.html (13 bytes)" in out
        assert "elvdoc/config.yaml" in out

    def test_show_invalid_config(self, work_dir, capsys):
        path = create_archive(work_dir / "doc.tar.gz", "", "", "", "foo: bar")

        code = run(["show", str(path)])

        out = capsys.readouterr().out
        assert code == 1
        assert "version" in out

    def test_show_missing_archive(self, work_dir, capsys):
        code = run(["show", str(work_dir / "absent.tar.gz")])

        assert code == 1
        assert "Cannot show" in capsys.readouterr().out


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_text_format(self):
        setup_logging(Settings(log_level="WARNING"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_json_format(self):
        setup_logging(Settings(log_format="json"))

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, json_log_formatter.JSONFormatter)
        record = logging.LogRecord("elvdoc", logging.INFO, __file__, 1, "hello", None, None)
        assert json.loads(formatter.format(record))["message"] == "hello"

    def test_verbose_forces_debug(self):
        setup_logging(Settings(log_level="ERROR"), verbose=True)

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(Settings(log_level="chatty"))

        assert logging.getLogger().level == logging.INFO
