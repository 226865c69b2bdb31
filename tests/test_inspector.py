"""Tests for the inspector module and the log_inspector CLI."""

import gzip
import os
from datetime import timedelta

import pytest

import log_inspector
from conftest import FailingFileSystem, START, backup_filename, make_file
from logroller.config import RollerConfig
from logroller.inspector import list_log_files, read_file, search_files


@pytest.fixture
def config(tmp_path):
    return RollerConfig(log_dir=str(tmp_path), log_filename="app.log")


def _gzip_file(directory, name, text):
    path = os.path.join(str(directory), name)
    with gzip.open(path, "wt") as f:
        f.write(text)
    return path


class TestListLogFiles:
    def test_active_first_then_backups_newest_first(self, tmp_path, config):
        older = backup_filename(START)
        newer = backup_filename(START + timedelta(hours=1), suffix=".gz")
        make_file(tmp_path, "app.log", b"live")
        make_file(tmp_path, older)
        _gzip_file(tmp_path, newer, "x")
        make_file(tmp_path, "unrelated.txt")

        result = list_log_files(config)

        assert [f.name for f in result] == ["app.log", newer, older]
        assert result[0].timestamp is None
        assert result[0].size == 4
        assert result[1].compressed is True
        assert result[2].timestamp == START

    def test_empty_directory(self, config):
        assert list_log_files(config) == []

    def test_missing_directory(self, tmp_path):
        config = RollerConfig(log_dir=str(tmp_path / "nope"), log_filename="app.log")
        assert list_log_files(config) == []


class TestReadFile:
    def test_read_plain_text(self, tmp_path, config):
        make_file(tmp_path, "app.log", b"hello\nworld\n")
        assert read_file(config, "app.log") == "hello\nworld\n"

    def test_read_gzip(self, tmp_path, config):
        name = backup_filename(START, suffix=".gz")
        _gzip_file(tmp_path, name, "compressed line\n")
        assert read_file(config, name) == "compressed line\n"

    def test_file_not_found(self, config):
        with pytest.raises(FileNotFoundError):
            read_file(config, "nonexistent.log")

    def test_read_goes_through_filesystem(self, tmp_path, config):
        make_file(tmp_path, "app.log", b"data\n")
        fs = FailingFileSystem(fail_ops={"open_read"}, marker="app.log")
        with pytest.raises(PermissionError):
            read_file(config, "app.log", fs)


class TestSearchFiles:
    def test_search_across_plain_and_compressed(self, tmp_path, config):
        gz = backup_filename(START, suffix=".gz")
        make_file(tmp_path, "app.log", b"INFO ok\nERROR disk full\n")
        _gzip_file(tmp_path, gz, "ERROR earlier failure\nINFO fine\n")

        results = search_files(config, "ERROR")

        assert results == [
            ("app.log", 2, "ERROR disk full"),
            (gz, 1, "ERROR earlier failure"),
        ]

    def test_no_matches(self, tmp_path, config):
        make_file(tmp_path, "app.log", b"nothing here\n")
        assert search_files(config, "ERROR") == []

    def test_corrupt_backup_skipped(self, tmp_path, config):
        make_file(tmp_path, backup_filename(START, suffix=".gz"), b"not gzip data")
        make_file(tmp_path, "app.log", b"ERROR live\n")
        assert search_files(config, "ERROR") == [("app.log", 1, "ERROR live")]

    def test_unreadable_file_skipped(self, tmp_path, config):
        stuck = backup_filename(START)
        make_file(tmp_path, stuck, b"ERROR hidden\n")
        make_file(tmp_path, "app.log", b"ERROR live\n")
        fs = FailingFileSystem(fail_ops={"open_read"}, marker=stuck)
        assert search_files(config, "ERROR", fs) == [("app.log", 1, "ERROR live")]

    def test_backups_in_glob_subdirectory(self, tmp_path):
        config = RollerConfig(log_dir=str(tmp_path), log_filename="app.log", backup_glob="old/*.log")
        (tmp_path / "old").mkdir()
        make_file(tmp_path / "old", "one.log", b"ERROR archived\n")
        assert search_files(config, "ERROR") == [
            (os.path.join("old", "one.log"), 1, "ERROR archived"),
        ]


# ── CLI ──────────────────────────────────────────────────────────────

class TestInspectorCli:
    @pytest.fixture(autouse=True)
    def _env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        monkeypatch.setenv("LOG_FILENAME", "app.log")

    def test_list(self, tmp_path, capsys):
        make_file(tmp_path, "app.log", b"x" * 2048)
        log_inspector.main(["--list"])
        out = capsys.readouterr().out
        assert "app.log" in out
        assert "2.0 KB" in out
        assert "active" in out

    def test_list_empty(self, capsys):
        log_inspector.main(["--list"])
        assert "No log files found." in capsys.readouterr().out

    def test_read(self, tmp_path, capsys):
        make_file(tmp_path, "app.log", b"line one\n")
        log_inspector.main(["--read", "app.log"])
        assert capsys.readouterr().out == "line one\n"

    def test_read_missing_exits_nonzero(self, capsys):
        with pytest.raises(SystemExit) as exc:
            log_inspector.main(["--read", "missing.log"])
        assert exc.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_search(self, tmp_path, capsys):
        make_file(tmp_path, "app.log", b"a\nneedle here\n")
        log_inspector.main(["--search", "needle"])
        assert "[app.log:2] needle here" in capsys.readouterr().out

    def test_requires_an_action(self):
        with pytest.raises(SystemExit):
            log_inspector.main([])
