# build_exe.py
# Freezes the installer action runner (src/htcc_installer/app.py) into a
# single HTCCInstallerActions.exe. make_msi.py embeds that file in the MSI
# Binary table, so it has to be one self-contained executable.

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path

APP_NAME = "HTCCInstallerActions"
PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENTRY_POINT = PROJECT_ROOT / "src" / "htcc_installer" / "app.py"
# Imported lazily by the runner, so PyInstaller cannot see them
HIDDEN_IMPORTS = ("htcc_installer.registry.winreg_store", "win32com.client", "msilib")


def run(cmd: list[str]) -> None:
    print("+", " ".join(cmd))
    subprocess.check_call(cmd)


def poetry_python() -> Path | None:
    """Interpreter of the Poetry environment, if Poetry knows about one."""
    poetry = shutil.which("poetry")
    if poetry is None:
        return None
    try:
        out = subprocess.run(
            [poetry, "env", "info", "--executable"],
            check=True,
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None
    return Path(out) if out else None


def select_python() -> Path:
    """
    The runner needs pywin32 and msilib frozen in, which only the project
    environment is guaranteed to have.
    """
    if os.environ.get("POETRY_ACTIVE") == "1" or os.environ.get("VIRTUAL_ENV"):
        return Path(sys.executable)

    scripts = "Scripts" if os.name == "nt" else "bin"
    local = PROJECT_ROOT / ".venv" / scripts / ("python.exe" if os.name == "nt" else "python")
    if local.exists():
        return local
    return poetry_python() or Path(sys.executable)


def has_pyinstaller(py: Path) -> bool:
    probe = subprocess.run(
        [str(py), "-c", "import PyInstaller"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return probe.returncode == 0


def pyinstaller_command(py: Path, dist_dir: Path, work_dir: Path) -> list[str]:
    cmd = [
        str(py), "-m", "PyInstaller",
        "--onefile",
        "--console",
        "--noconfirm",
        "--clean",
        "--name", APP_NAME,
        "--distpath", str(dist_dir),
        "--workpath", str(work_dir),
        "--specpath", str(work_dir),
        "--paths", str(PROJECT_ROOT / "src"),
    ]
    for module in HIDDEN_IMPORTS:
        cmd += ["--hidden-import", module]
    cmd.append(str(ENTRY_POINT))
    return cmd


def main(argv=None) -> int:
    windows_root = PROJECT_ROOT / "platforms" / "windows"
    ap = argparse.ArgumentParser(description=f"Build {APP_NAME}.exe with PyInstaller.")
    ap.add_argument("--dist-dir", default=str(windows_root / "dist"), help="Output directory for the executable.")
    ap.add_argument("--keep-build", action="store_true", help="Keep the PyInstaller work directory.")
    args = ap.parse_args(argv)

    dist_dir = Path(args.dist_dir).resolve()
    work_dir = windows_root / "build"
    exe = dist_dir / f"{APP_NAME}.exe"

    py = select_python()
    if not has_pyinstaller(py):
        print(f"PyInstaller is not installed for {py}.")
        print("Run `poetry install --with dev` and retry.")
        return 1

    if exe.exists():
        exe.unlink()

    try:
        run(pyinstaller_command(py, dist_dir, work_dir))
    except subprocess.CalledProcessError as e:
        print(f"Build failed with exit code {e.returncode}")
        return e.returncode
    finally:
        if not args.keep_build:
            shutil.rmtree(work_dir, ignore_errors=True)

    if not exe.exists():
        print(f"Expected executable not found at: {exe}")
        return 3
    print(f"\nBuild complete: {exe}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
