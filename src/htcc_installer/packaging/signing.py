import os
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional

from htcc_installer.errors import SigningError
from htcc_installer.packaging.project import InstallerProject, SigningConfig

SIGNTOOL_ENV = "HTCC_SIGNTOOL"
SIGNABLE_SUFFIXES = (".exe", ".dll", ".msi")


def signtool_command(paths: Iterable[Path], signature: SigningConfig, signtool: Optional[str] = None) -> List[str]:
    """
    Build a signtool invocation that signs with the certificate whose SHA-1
    thumbprint is ``signature.certificate_id`` and a SHA-256 file digest.
    """
    cmd = [
        signtool or os.environ.get(SIGNTOOL_ENV, "signtool"),
        "sign",
        "/sha1", signature.certificate_id,
        "/fd", "sha256",
        "/d", signature.description,
    ]
    if signature.timestamp_url:
        cmd += ["/tr", signature.timestamp_url, "/td", "sha256"]
    cmd += [str(p) for p in paths]
    return cmd


def sign_files(paths: List[Path], signature: SigningConfig) -> None:
    if not paths:
        return
    cmd = signtool_command(paths, signature)
    print("+", " ".join(cmd))
    try:
        subprocess.check_call(cmd)
    except subprocess.CalledProcessError as e:
        raise SigningError(f"signtool failed with exit code {e.returncode}")
    except FileNotFoundError as e:
        raise SigningError(f"signtool not found: {e}")


def sign_payload(project: InstallerProject) -> None:
    """Sign every executable payload file in place, before it is packaged."""
    if project.signature is None or not project.sign_all_files:
        return
    paths = [f.source for f in project.files if f.source.suffix.lower() in SIGNABLE_SUFFIXES]
    paths += [p for p in project.binaries.values() if p.suffix.lower() in SIGNABLE_SUFFIXES]
    sign_files(paths, project.signature)


def sign_package(project: InstallerProject, msi_path: Path) -> None:
    if project.signature is None:
        return
    sign_files([msi_path], project.signature)
