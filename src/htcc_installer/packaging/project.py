"""
Installer Project Model

Describes everything that goes into the HTCC MSI (features, payload files,
registry rows, shortcuts, custom actions, version and signing) as plain data,
independent of the MSI database writer. The build script assembles a project
step by step, then hands it to ``msi_writer.build_msi``.

Example:
    project = create_project(input_root, actions_exe)
    set_project_version(project, load_version_descriptor(input_root))
    create_shortcuts(project)
    add_game_configurations(project)
    register_api_layer(project)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from htcc_installer.config import DEFAULT_CONFIG, InstallerConfig
from htcc_installer.errors import MsiBuildError
from htcc_installer.packaging.entries import HKLM, RegistryEntry
from htcc_installer.packaging.regfile import load_reg_file
from htcc_installer.packaging.upgrade_script import related_products_script
from htcc_installer.packaging.version import VersionDescriptor
from htcc_installer.registry import REG_DWORD, REG_SZ

# CustomAction.Type flags
CA_EXE_IN_BINARY = 2
CA_SET_PROPERTY = 51
CA_DEFERRED = 0x400
CA_NO_IMPERSONATE = 0x800
CA_JSCRIPT = 5
CA_INLINE = 0x20
CA_CONTINUE = 0x40

EXECUTE_SEQUENCE = "InstallExecuteSequence"
UI_SEQUENCE = "InstallUISequence"

# Ahead of the standard FindRelatedProducts (25)
FIND_RELATED_PRODUCTS_SEQUENCE = 5

MAIN_FEATURE = "DefaultFeature"
RESOURCES_FEATURE = "InstallerResources"


@dataclass(frozen=True)
class PayloadFile:
    source: Path
    feature: str = MAIN_FEATURE

    @property
    def name(self) -> str:
        return self.source.name


@dataclass(frozen=True)
class Shortcut:
    name: str
    directory: str
    target: str


@dataclass(frozen=True)
class CustomAction:
    """
    One CustomAction row, scheduled in each of ``tables`` either at a fixed
    ``sequence`` number or directly after the standard action ``after``.
    """
    id: str
    type: int
    source: Optional[str]
    target: str
    after: Optional[str] = None
    sequence: Optional[int] = None
    condition: Optional[str] = None
    tables: Tuple[str, ...] = (EXECUTE_SEQUENCE,)


@dataclass(frozen=True)
class Feature:
    id: str
    title: str
    level: int = 1


@dataclass(frozen=True)
class SigningConfig:
    certificate_id: str
    description: str
    timestamp_url: Optional[str] = None


@dataclass
class InstallerProject:
    config: InstallerConfig
    input_root: Path
    out_file_name: str
    version: str = "0.0.0.0"
    features: List[Feature] = field(default_factory=list)
    files: List[PayloadFile] = field(default_factory=list)
    registry: List[RegistryEntry] = field(default_factory=list)
    shortcuts: List[Shortcut] = field(default_factory=list)
    custom_actions: List[CustomAction] = field(default_factory=list)
    launch_conditions: List[Tuple[str, str]] = field(default_factory=list)
    binaries: Dict[str, Path] = field(default_factory=dict)
    signature: Optional[SigningConfig] = None
    sign_all_files: bool = False

    def add_reg_value(self, entry: RegistryEntry) -> None:
        self.registry.append(entry)

    def files_in(self, feature: str) -> List[PayloadFile]:
        return [f for f in self.files if f.feature == feature]


def resolve_wildcards(input_root: Path, pattern: str, exclude_suffixes=()) -> List[Path]:
    """Non-recursive ``dir/*.*`` style expansion, sorted for stable output."""
    return sorted(
        p for p in input_root.glob(pattern)
        if p.is_file() and p.suffix.lower() not in exclude_suffixes
    )


def create_project(input_root: Path, actions_exe: Optional[Path] = None,
                   config: InstallerConfig = DEFAULT_CONFIG) -> InstallerProject:
    project = InstallerProject(
        config=config,
        input_root=input_root,
        out_file_name=config.product_name,
        features=[
            Feature(MAIN_FEATURE, "Complete", 1),
            # Available but not installed unless selected
            Feature(RESOURCES_FEATURE, "Installer Resources", 2),
        ],
    )

    for path in resolve_wildcards(input_root, "bin/*.*", exclude_suffixes=(".pdb",)):
        project.files.append(PayloadFile(path, MAIN_FEATURE))
    for path in resolve_wildcards(input_root, "installer/*.*"):
        project.files.append(PayloadFile(path, RESOURCES_FEATURE))

    project.add_reg_value(RegistryEntry(HKLM, config.install_dir_key, "InstallDir", "[INSTALLDIR]"))

    project.custom_actions.append(CustomAction(
        id="SetARPINSTALLLOCATION",
        type=CA_SET_PROPERTY,
        source="ARPINSTALLLOCATION",
        target="[INSTALLDIR]",
        after="CostFinalize",
    ))

    # Older releases may be per-user; the standard FindRelatedProducts only
    # sees the scope of this install
    project.custom_actions.append(CustomAction(
        id="FindAllRelatedProducts",
        type=CA_JSCRIPT | CA_INLINE | CA_CONTINUE,
        source=None,
        target=related_products_script(),
        sequence=FIND_RELATED_PRODUCTS_SEQUENCE,
        tables=(UI_SEQUENCE, EXECUTE_SEQUENCE),
    ))

    project.launch_conditions.append((
        "Installed OR NOT WIX_DOWNGRADE_DETECTED",
        "A newer version of [ProductName] is already installed.",
    ))

    # Runs elevated once HTCC's own layer value has been written
    if actions_exe is not None:
        project.binaries[config.actions_binary] = actions_exe
        project.custom_actions.append(CustomAction(
            id="ReorderUltraleapLayer",
            type=CA_EXE_IN_BINARY | CA_DEFERRED | CA_NO_IMPERSONATE,
            source=config.actions_binary,
            target="reorder-layers",
            after="WriteRegistryValues",
        ))
    return project


def set_project_version(project: InstallerProject, version: VersionDescriptor) -> None:
    project.version = version.quad
    project.out_file_name += version.out_file_suffix()

    for name, value in version.registry_values():
        value_type = REG_DWORD if isinstance(value, int) else REG_SZ
        project.add_reg_value(RegistryEntry(HKLM, project.config.version_key, name, value, value_type))


def create_shortcuts(project: InstallerProject) -> None:
    target = project.config.settings_exe
    matches = [f for f in project.files_in(MAIN_FEATURE) if f.name.lower() == target.lower()]
    if len(matches) != 1:
        raise MsiBuildError(f"Expected exactly one {target} in bin/, found {len(matches)}")

    for directory in ("DesktopFolder", "ProgramMenuFolder"):
        project.shortcuts.append(Shortcut(project.config.shortcut_name, directory, matches[0].name))


def add_game_configurations(project: InstallerProject) -> None:
    for reg_file in sorted((project.input_root / "installer").glob("*.reg")):
        project.registry.extend(load_reg_file(reg_file))


def register_api_layer(project: InstallerProject) -> None:
    config = project.config
    project.add_reg_value(RegistryEntry(
        HKLM, config.api_layers_key, f"[INSTALLDIR]{config.api_layer_manifest}", 0, REG_DWORD,
    ))


def sign_project(project: InstallerProject, signing_key: Optional[str], timestamp_server: Optional[str]) -> None:
    if signing_key is not None:
        project.signature = SigningConfig(
            certificate_id=signing_key,
            description=project.out_file_name,
            timestamp_url=timestamp_server,
        )
        project.sign_all_files = True
    else:
        project.out_file_name += "-UNSIGNED"
