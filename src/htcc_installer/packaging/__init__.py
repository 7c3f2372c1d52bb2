from .entries import HKCR, HKCU, HKLM, HKU, RegistryEntry
from .version import VersionDescriptor, load_version_descriptor, parse_version_descriptor
from .regfile import load_reg_file, parse_reg
from .project import (
    InstallerProject,
    add_game_configurations,
    create_project,
    create_shortcuts,
    register_api_layer,
    set_project_version,
    sign_project,
)
from .signing import sign_package, sign_payload
from .msi_writer import build_msi

__all__ = [
    "HKCR", "HKCU", "HKLM", "HKU", "RegistryEntry",
    "VersionDescriptor", "load_version_descriptor", "parse_version_descriptor",
    "load_reg_file", "parse_reg",
    "InstallerProject", "add_game_configurations", "create_project", "create_shortcuts",
    "register_api_layer", "set_project_version", "sign_project",
    "sign_package", "sign_payload",
    "build_msi",
]
