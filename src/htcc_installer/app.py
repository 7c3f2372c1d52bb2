# entry point for the installer action runner (HTCCInstallerActions.exe)
# the MSI runs `reorder-layers` as a deferred, elevated custom action;
# the other commands are run by hand or by a bootstrapper

import argparse
import os
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path

from htcc_installer.actions import (
    ActionResult,
    find_all_related_products,
    layer_status,
    reorder_ultraleap_layer,
)
from htcc_installer.config import DEFAULT_CONFIG
from htcc_installer.file_operations import Logger
from htcc_installer.products import WindowsInstallerProducts, read_package_property
from htcc_installer.session import PropertyBag

MSIEXEC_ENV = "HTCC_MSIEXEC"


def _live_store():
    # winreg only exists on Windows
    from htcc_installer.registry.winreg_store import WinRegApiLayerStore
    return WinRegApiLayerStore()


def _live_products():
    return WindowsInstallerProducts()


def _default_manifest() -> str:
    program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
    return str(Path(program_files) / DEFAULT_CONFIG.install_dir_name / DEFAULT_CONFIG.api_layer_manifest)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="htcc-installer-actions",
                                 description="HTCC installer custom actions.")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("reorder-layers", help="Move the Ultraleap OpenXR layer after HTCC's layer.")

    find = sub.add_parser("find-related-products",
                          help="Print upgrade properties for installed HTCC releases in any scope.")
    find.add_argument("--upgrade-code", default=DEFAULT_CONFIG.upgrade_code)
    find.add_argument("--product-code", required=True, help="Product code of the package being installed.")

    install = sub.add_parser("install", help="Install an HTCC MSI, removing releases installed in the other scope.")
    install.add_argument("msi", help="Path to the HTCC MSI.")
    install.add_argument("msiexec_args", nargs=argparse.REMAINDER,
                         help="Extra msiexec arguments, e.g. /qn /l*v install.log")

    status = sub.add_parser("status", help="Report whether the Ultraleap layer will feed HTCC.")
    status.add_argument("--manifest", default=None, help="Path of HTCC's APILayer.json.")
    return ap


def handle(args, session: PropertyBag) -> int:
    if args.command == "reorder-layers":
        return int(reorder_ultraleap_layer(session, _live_store()))

    if args.command == "find-related-products":
        session.load({"UpgradeCode": args.upgrade_code, "ProductCode": args.product_code})
        find_all_related_products(session, _live_products())
        for name, value in session.published().items():
            print(f"{name}={value}")
        return int(ActionResult.SUCCESS)

    if args.command == "install":
        msi = Path(args.msi).resolve()
        if not msi.exists():
            print(f"MSI not found: {msi}")
            return int(ActionResult.FAILURE)
        session.load({
            "UpgradeCode": read_package_property(msi, "UpgradeCode"),
            "ProductCode": read_package_property(msi, "ProductCode"),
        })
        find_all_related_products(session, _live_products())

        props = [f"{name}={value}" for name, value in session.published().items()]
        extra = [a for a in args.msiexec_args if a != "--"]
        cmd = [os.environ.get(MSIEXEC_ENV, "msiexec"), "/i", str(msi)] + props + extra
        print("+", " ".join(cmd))
        return subprocess.call(cmd)

    if args.command == "status":
        manifest = args.manifest or _default_manifest()
        status, path = layer_status(_live_store(), manifest)
        print(f"ultraleap:status={status.value}")
        if path:
            print(f"ultraleap:path={path}")
        return int(ActionResult.SUCCESS)

    raise ValueError(f"unknown command: {args.command}")


def main(argv=None):
    args = build_parser().parse_args(argv)
    session = PropertyBag(echo=True)

    status = "ok"
    error = None
    exit_code = int(ActionResult.FAILURE)

    try:
        exit_code = handle(args, session)
    except Exception as e:
        status = "error"
        error = repr(e)
        Logger.log_error(f"{args.command}: {error}")
    else:
        if args.command == "reorder-layers" and exit_code != ActionResult.SUCCESS:
            Logger.log_error(f"{args.command}: {session.messages[-1] if session.messages else 'failed'}")

    # Minimal diagnostic log; custom action stdout does not reach the MSI log
    Logger.log_event({
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": args.command,
        "argv": sys.argv[1:] if argv is None else list(argv),
        "status": status,
        "exit_code": exit_code,
        "messages": session.messages,
        "properties": session.published(),
        "error": error,
    })

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
