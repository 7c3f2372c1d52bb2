import json
from pathlib import Path
from unittest.mock import patch

from htcc_installer.file_operations import FileManager, Logger


def test_log_dir_override(isolated_log_dir):
    assert Logger.log_dir() == isolated_log_dir


def test_log_dir_defaults_to_program_data(monkeypatch, tmp_path):
    monkeypatch.delenv("HTCC_INSTALLER_LOG_DIR")
    monkeypatch.setenv("PROGRAMDATA", str(tmp_path))

    assert Logger.log_dir() == tmp_path / "HTCC" / "installer-logs"


def test_log_event_overwrites_last_invocation(isolated_log_dir):
    Logger.log_event({"command": "status"})
    Logger.log_event({"command": "reorder-layers"})

    data = json.loads((isolated_log_dir / "last_invocation.json").read_text(encoding="utf-8"))
    assert data == {"command": "reorder-layers"}


def test_log_error_appends(isolated_log_dir):
    Logger.log_error("first")
    Logger.log_error("second")

    lines = (isolated_log_dir / "errors.log").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("ERROR: first")
    assert lines[1].endswith("ERROR: second")


def test_logging_failures_are_printed_not_raised(capsys):
    with patch.object(FileManager, "write_to_file", side_effect=IOError("disk full")):
        Logger.log_event({"command": "status"})

    assert "Failed to log event: disk full" in capsys.readouterr().out


def test_read_text_guess_encoding(tmp_path):
    utf16 = tmp_path / "a.reg"
    utf16.write_bytes("REGEDIT4".encode("utf-16"))
    utf8 = tmp_path / "b.reg"
    utf8.write_bytes(b"\xef\xbb\xbfREGEDIT4")

    assert FileManager.read_text_guess_encoding(utf16) == "REGEDIT4"
    assert FileManager.read_text_guess_encoding(utf8) == "REGEDIT4"


def test_read_missing_file(tmp_path):
    missing = tmp_path / "missing.json"
    try:
        FileManager.read_file(missing)
    except FileNotFoundError as e:
        assert str(missing) in str(e)
    else:
        raise AssertionError("expected FileNotFoundError")


def test_write_creates_parent_directories(tmp_path):
    target = tmp_path / "a" / "b" / "c.txt"
    FileManager.write_to_file(target, "hello")
    assert Path(target).read_text(encoding="utf-8") == "hello"
