"""
Tests for the MSI build script. The msilib writer and signtool are patched
out; the Windows-only end-to-end build lives in test_build.py.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

import make_msi
from htcc_installer.config import DEFAULT_CONFIG
from htcc_installer.errors import MsiBuildError

VERSION = {"components": {"a": 1, "b": 0, "c": 2, "d": 7}, "readable": "1.0.2", "tagged": True}


@pytest.fixture
def input_root(tmp_path: Path) -> Path:
    root = tmp_path / "out"
    (root / "bin").mkdir(parents=True)
    (root / "installer").mkdir()
    (root / "bin" / DEFAULT_CONFIG.settings_exe).write_bytes(b"MZ")
    (root / "bin" / DEFAULT_CONFIG.api_layer_manifest).write_text("{}", encoding="utf-8")
    (root / "installer" / "version.json").write_text(json.dumps(VERSION), encoding="utf-8")
    return root


@pytest.fixture
def actions_exe(tmp_path: Path) -> Path:
    exe = tmp_path / DEFAULT_CONFIG.actions_exe
    exe.write_bytes(b"MZ")
    return exe


def fake_build_msi(project, out_dir):
    return out_dir / f"{project.out_file_name}.msi"


def test_missing_settings_app(tmp_path, actions_exe, capsys):
    assert make_msi.create_installer(tmp_path, actions_exe=actions_exe) == 1
    assert "Cannot find bin/HTCCSettings.exe" in capsys.readouterr().out


def test_missing_action_runner(input_root, tmp_path, capsys):
    assert make_msi.create_installer(input_root, actions_exe=tmp_path / "nope.exe") == 1
    assert "Action runner not found" in capsys.readouterr().out


def test_unsigned_build_writes_stamp_file(input_root, actions_exe, tmp_path, capsys):
    stamp = tmp_path / "stamp.txt"

    with patch.object(make_msi, "build_msi", side_effect=fake_build_msi) as build:
        code = make_msi.create_installer(input_root, stamp_file=stamp, actions_exe=actions_exe, out_dir=tmp_path)

    assert code == 0
    project = build.call_args.args[0]
    assert project.version == "1.0.2.7"
    assert project.out_file_name == f"{DEFAULT_CONFIG.product_name}-v1.0.2-UNSIGNED"
    assert stamp.read_text(encoding="utf-8").strip().endswith("-v1.0.2-UNSIGNED.msi")
    assert "Package is UNSIGNED." in capsys.readouterr().out


def test_signed_build_signs_payload_and_package(input_root, actions_exe, tmp_path):
    with patch.object(make_msi, "build_msi", side_effect=fake_build_msi), \
            patch("subprocess.check_call") as check_call:
        code = make_msi.create_installer(input_root, signing_key="THUMB", actions_exe=actions_exe, out_dir=tmp_path)

    assert code == 0
    payload, package = [c.args[0] for c in check_call.call_args_list]
    assert str(actions_exe.resolve()) in payload
    assert package[-1].endswith(f"{DEFAULT_CONFIG.product_name}-v1.0.2.msi")


def test_build_errors_are_reported(input_root, actions_exe, capsys):
    with patch.object(make_msi, "build_msi", side_effect=MsiBuildError("No payload files in bin/")):
        assert make_msi.create_installer(input_root, actions_exe=actions_exe) == 1

    assert "No payload files in bin/" in capsys.readouterr().out


def test_missing_version_descriptor(input_root, actions_exe, capsys):
    (input_root / "installer" / "version.json").unlink()

    assert make_msi.create_installer(input_root, actions_exe=actions_exe) == 1
    assert "installer/version.json" in capsys.readouterr().out
