# make_msi.py
# Per-machine x64 MSI for Hand Tracked Cockpit Clicking (HTCC).
# Installs INPUT_ROOT/bin to %ProgramFiles%\HTCC, stamps the version into
# HKLM\SOFTWARE\Fred Emmott\HTCC\Version, registers the OpenXR API layer,
# imports installer/*.reg, creates Desktop + Programs menu shortcuts and
# embeds the custom action runner that keeps the Ultraleap layer after ours.
#
# Build the action runner first: python platforms/windows/build_exe.py

import argparse
from pathlib import Path

from htcc_installer.config import DEFAULT_CONFIG
from htcc_installer.errors import HTCCInstallerError
from htcc_installer.packaging import (
    add_game_configurations,
    build_msi,
    create_project,
    create_shortcuts,
    load_version_descriptor,
    register_api_layer,
    set_project_version,
    sign_package,
    sign_payload,
    sign_project,
)

DEFAULT_ACTIONS_EXE = Path(__file__).resolve().parent / "platforms" / "windows" / "dist" / DEFAULT_CONFIG.actions_exe


def create_installer(
        input_root: Path,
        signing_key: str | None = None,
        timestamp_server: str | None = None,
        stamp_file: Path | None = None,
        actions_exe: Path = DEFAULT_ACTIONS_EXE,
        out_dir: Path = Path("."),
) -> int:
    input_root = input_root.resolve()
    if not (input_root / "bin" / DEFAULT_CONFIG.settings_exe).exists():
        print(f"Cannot find bin/{DEFAULT_CONFIG.settings_exe} in INPUT_ROOT ({input_root})")
        return 1
    if not actions_exe.exists():
        print(f"Action runner not found: {actions_exe}")
        print("Build it with platforms/windows/build_exe.py or pass --actions-exe.")
        return 1

    try:
        project = create_project(input_root, actions_exe.resolve())
        set_project_version(project, load_version_descriptor(input_root))

        create_shortcuts(project)
        add_game_configurations(project)
        register_api_layer(project)

        sign_project(project, signing_key, timestamp_server)
        sign_payload(project)
        out_file = build_msi(project, out_dir.resolve())
        sign_package(project, out_file)
    except HTCCInstallerError as e:
        print(e)
        return 1

    print(f"MSI built: {out_file}")
    print(f"Version: {project.version}")
    print(f"Install location: %ProgramFiles%\\{DEFAULT_CONFIG.install_dir_name}")
    if project.signature is None:
        print("Package is UNSIGNED.")

    if stamp_file is not None:
        stamp_file.write_text(f"{out_file}\n", encoding="utf-8")
        print(f"Wrote output path '{out_file}' to `{stamp_file.resolve()}`")
    return 0


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Build the HTCC MSI from a directory of build outputs.")
    ap.add_argument("input_root", metavar="INPUT_ROOT", help="Location of files to include in the installer.")
    ap.add_argument("--signing-key", help="Code signing key ID (SHA-1 thumbprint).")
    ap.add_argument("--timestamp-server", help="Code signing timestamp server.")
    ap.add_argument("--stamp-file", help="The full path to the produced MSI will be written here on success.")
    ap.add_argument("--actions-exe", default=str(DEFAULT_ACTIONS_EXE), help="Built HTCCInstallerActions.exe.")
    ap.add_argument("--out-dir", default=".", help="Directory for the MSI.")
    args = ap.parse_args()

    raise SystemExit(create_installer(
        input_root=Path(args.input_root),
        signing_key=args.signing_key,
        timestamp_server=args.timestamp_server,
        stamp_file=Path(args.stamp_file) if args.stamp_file else None,
        actions_exe=Path(args.actions_exe),
        out_dir=Path(args.out_dir),
    ))
