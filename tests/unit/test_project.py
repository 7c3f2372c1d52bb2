"""
Tests for assembling the installer project from a directory of build outputs.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from htcc_installer.actions import UPGRADE_PROPERTIES
from htcc_installer.config import DEFAULT_CONFIG
from htcc_installer.errors import MsiBuildError
from htcc_installer.packaging import (
    HKLM,
    RegistryEntry,
    add_game_configurations,
    create_project,
    create_shortcuts,
    load_version_descriptor,
    register_api_layer,
    set_project_version,
    sign_project,
)
from htcc_installer.packaging.msi_writer import SECURE_PROPERTIES
from htcc_installer.packaging.project import (
    CA_CONTINUE,
    CA_DEFERRED,
    CA_EXE_IN_BINARY,
    CA_INLINE,
    CA_JSCRIPT,
    CA_NO_IMPERSONATE,
    EXECUTE_SEQUENCE,
    MAIN_FEATURE,
    RESOURCES_FEATURE,
    UI_SEQUENCE,
)
from htcc_installer.registry import REG_DWORD, REG_SZ

VERSION = {
    "components": {"a": 1, "b": 2, "c": 3, "d": 456},
    "readable": "1.2.3",
    "tweakLabel": "beta",
    "tagged": False,
}


@pytest.fixture
def input_root(tmp_path: Path) -> Path:
    root = tmp_path / "out"
    (root / "bin").mkdir(parents=True)
    (root / "installer").mkdir()
    for name in ("HTCCSettings.exe", "APILayer.json", "APILayer.dll", "APILayer.pdb"):
        (root / "bin" / name).write_bytes(b"payload")
    (root / "installer" / "version.json").write_text(json.dumps(VERSION), encoding="utf-8")
    (root / "installer" / "MSFS.reg").write_text(
        "Windows Registry Editor Version 5.00\n"
        "[HKEY_LOCAL_MACHINE\\SOFTWARE\\Fred Emmott\\HTCC\\Games\\MSFS]\n"
        "\"Executable\"=\"FlightSimulator.exe\"\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def actions_exe(tmp_path: Path) -> Path:
    exe = tmp_path / DEFAULT_CONFIG.actions_exe
    exe.write_bytes(b"MZ")
    return exe


def test_payload_excludes_debug_symbols(input_root):
    project = create_project(input_root)

    names = [f.name for f in project.files_in(MAIN_FEATURE)]
    assert names == ["APILayer.dll", "APILayer.json", "HTCCSettings.exe"]


def test_installer_resources_are_an_optional_feature(input_root):
    project = create_project(input_root)

    resources = [f.name for f in project.files_in(RESOURCES_FEATURE)]
    assert resources == ["MSFS.reg", "version.json"]
    levels = {f.id: f.level for f in project.features}
    assert levels == {MAIN_FEATURE: 1, RESOURCES_FEATURE: 2}


def test_install_dir_is_recorded(input_root):
    project = create_project(input_root)

    assert RegistryEntry(HKLM, DEFAULT_CONFIG.install_dir_key, "InstallDir", "[INSTALLDIR]") in project.registry
    [arp] = [a for a in project.custom_actions if a.id == "SetARPINSTALLLOCATION"]
    assert (arp.source, arp.target, arp.after) == ("ARPINSTALLLOCATION", "[INSTALLDIR]", "CostFinalize")


def test_reorder_action_runs_deferred_and_elevated_after_registry(input_root, actions_exe):
    project = create_project(input_root, actions_exe)

    [action] = [a for a in project.custom_actions if a.id == "ReorderUltraleapLayer"]
    assert action.type == CA_EXE_IN_BINARY | CA_DEFERRED | CA_NO_IMPERSONATE
    assert action.after == "WriteRegistryValues"
    assert action.target == "reorder-layers"
    assert project.binaries == {DEFAULT_CONFIG.actions_binary: actions_exe}


def test_no_reorder_action_without_runner(input_root):
    project = create_project(input_root)

    assert "ReorderUltraleapLayer" not in [a.id for a in project.custom_actions]
    assert project.binaries == {}


def test_cross_scope_detection_runs_first_in_both_sequences(input_root):
    project = create_project(input_root)

    [action] = [a for a in project.custom_actions if a.id == "FindAllRelatedProducts"]
    assert action.type == CA_JSCRIPT | CA_INLINE | CA_CONTINUE
    assert action.source is None
    assert action.sequence == 5
    assert set(action.tables) == {UI_SEQUENCE, EXECUTE_SEQUENCE}
    assert action.condition is None


def test_cross_scope_detection_script(input_root):
    project = create_project(input_root)

    [action] = [a for a in project.custom_actions if a.id == "FindAllRelatedProducts"]
    script = action.target
    assert "Session.Installer.RelatedProducts(upgradeCode)" in script
    assert 'Session.Property("ProductCode").toUpperCase()' in script
    for name in UPGRADE_PROPERTIES:
        assert f'Session.Property("{name}") = code;' in script
    # The Target column is formatted; brackets would be resolved as properties
    assert "[" not in script and "]" not in script


def test_upgrade_properties_reach_the_elevated_server():
    assert set(UPGRADE_PROPERTIES) <= set(SECURE_PROPERTIES)


def test_newer_version_blocks_install(input_root):
    project = create_project(input_root)

    assert project.launch_conditions == [(
        "Installed OR NOT WIX_DOWNGRADE_DETECTED",
        "A newer version of [ProductName] is already installed.",
    )]


def test_version_stamp(input_root):
    project = create_project(input_root)
    set_project_version(project, load_version_descriptor(input_root))

    assert project.version == "1.2.3.456"
    assert project.out_file_name == f"{DEFAULT_CONFIG.product_name}-v1.2.3+beta.456"
    stamped = {e.name: e for e in project.registry if e.key == DEFAULT_CONFIG.version_key}
    assert set(stamped) == {"Semantic", "Readable", "Major", "Minor", "Build", "Tweak", "Triple", "Quad"}
    assert stamped["Tweak"].value_type == REG_DWORD
    assert stamped["Quad"] == RegistryEntry(HKLM, DEFAULT_CONFIG.version_key, "Quad", "1.2.3.456", REG_SZ)


def test_shortcuts_point_at_settings_app(input_root):
    project = create_project(input_root)
    create_shortcuts(project)

    assert [(s.directory, s.name, s.target) for s in project.shortcuts] == [
        ("DesktopFolder", "HTCC Settings", "HTCCSettings.exe"),
        ("ProgramMenuFolder", "HTCC Settings", "HTCCSettings.exe"),
    ]


def test_shortcuts_require_settings_app(input_root):
    (input_root / "bin" / "HTCCSettings.exe").unlink()
    project = create_project(input_root)

    with pytest.raises(MsiBuildError, match="HTCCSettings.exe"):
        create_shortcuts(project)


def test_game_configurations_become_registry_rows(input_root):
    project = create_project(input_root)
    add_game_configurations(project)

    assert RegistryEntry(
        HKLM, r"SOFTWARE\Fred Emmott\HTCC\Games\MSFS", "Executable", "FlightSimulator.exe", REG_SZ,
    ) in project.registry


def test_api_layer_registration(input_root):
    project = create_project(input_root)
    register_api_layer(project)

    entry = project.registry[-1]
    assert entry.root == HKLM
    assert entry.key == DEFAULT_CONFIG.api_layers_key
    assert entry.name == "[INSTALLDIR]APILayer.json"
    assert entry.msi_value() == "#0"


def test_unsigned_build_is_marked(input_root):
    project = create_project(input_root)
    sign_project(project, None, None)

    assert project.signature is None
    assert project.out_file_name.endswith("-UNSIGNED")


def test_signed_build(input_root):
    project = create_project(input_root)
    set_project_version(project, load_version_descriptor(input_root))
    sign_project(project, "ABCDEF0123", "http://timestamp.example")

    assert project.sign_all_files
    assert project.signature.certificate_id == "ABCDEF0123"
    assert project.signature.timestamp_url == "http://timestamp.example"
    assert project.signature.description == project.out_file_name
    assert not project.out_file_name.endswith("-UNSIGNED")
