# msi_writer.py
# Writes an InstallerProject to a per-machine x64 MSI with msilib.
# msilib left the standard library in Python 3.13; the python-msilib
# distribution provides the same module from then on. Windows only.

import uuid
from pathlib import Path
from typing import Dict

from htcc_installer.errors import MsiBuildError
from htcc_installer.packaging.project import MAIN_FEATURE, CustomAction, InstallerProject

COMPONENT_64BIT = 256

# Upgrade.Attributes
UPGRADE_MIGRATE_FEATURES = 1
UPGRADE_ONLY_DETECT = 2

# Standard actions that must be scheduled for upgrades and launch conditions
UPGRADE_ACTIONS = {
    "InstallExecuteSequence": [
        ("FindRelatedProducts", 25),
        ("LaunchConditions", 100),
        ("MigrateFeatureStates", 1200),
        ("RemoveExistingProducts", 1450),
    ],
    "InstallUISequence": [
        ("FindRelatedProducts", 25),
        ("LaunchConditions", 100),
        ("MigrateFeatureStates", 1200),
    ],
}

SECURE_PROPERTIES = ("WIX_UPGRADE_DETECTED", "WIX_DOWNGRADE_DETECTED", "MIGRATE", "UPGRADINGPRODUCTCODE")


def guid():
    return "{" + str(uuid.uuid4()).upper() + "}"


def _sequence_of(db, table: str, action: str):
    view = db.OpenView(f"SELECT `Sequence` FROM `{table}` WHERE `Action`='{action}'")
    try:
        view.Execute(None)
        record = view.Fetch()
        return record.GetInteger(1) if record else None
    finally:
        view.Close()


def _sequence_for(db, action: CustomAction, table: str) -> int:
    if action.sequence is not None:
        return action.sequence
    anchor = _sequence_of(db, table, action.after)
    if anchor is None:
        raise MsiBuildError(f"{action.after} is not scheduled in {table}")
    return anchor + 1


def _ensure_actions(db, msilib):
    for table, actions in UPGRADE_ACTIONS.items():
        for action, seq in actions:
            if _sequence_of(db, table, action) is None:
                msilib.add_data(db, table, [(action, None, seq)])


def _check_unique_names(project: InstallerProject):
    seen = set()
    for f in project.files:
        name = f.name.lower()
        if name in seen:
            raise MsiBuildError(f"Two payload files would install as {f.name}")
        seen.add(name)


def build_msi(project: InstallerProject, out_dir: Path) -> Path:
    import msilib
    from msilib import schema, sequence
    from msilib import Directory, Feature, CAB

    config = project.config
    _check_unique_names(project)
    main_files = project.files_in(MAIN_FEATURE)
    if not main_files:
        raise MsiBuildError("No payload files in bin/")

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{project.out_file_name}.msi"
    if out_path.exists():
        out_path.unlink()

    # Fresh product code per build; the upgrade code ties releases together
    product_code = guid()

    db = msilib.init_database(str(out_path), schema, config.product_name, product_code,
                              project.version, config.manufacturer)
    msilib.add_tables(db, sequence)

    si = db.GetSummaryInformation(1)
    si.SetProperty(msilib.PID_TEMPLATE, "x64;1033")
    si.Persist()

    msilib.add_data(db, "Property", [
        ("ALLUSERS", "1"),
        ("UpgradeCode", config.upgrade_code),
        ("SecureCustomProperties", ";".join(SECURE_PROPERTIES)),
    ])

    # FindAllRelatedProducts fills WIX_UPGRADE_DETECTED for the other scope;
    # RemoveExistingProducts then removes whatever it names
    msilib.add_data(db, "Upgrade", [
        (config.upgrade_code, None, project.version, None, UPGRADE_MIGRATE_FEATURES, None, "WIX_UPGRADE_DETECTED"),
        (config.upgrade_code, project.version, None, None, UPGRADE_ONLY_DETECT, None, "WIX_DOWNGRADE_DETECTED"),
    ])
    _ensure_actions(db, msilib)

    cab = CAB("htcc.cab")

    # Directory tree:
    #   TARGETDIR
    #     ProgramFiles64Folder
    #       INSTALLDIR = HTCC
    #     DesktopFolder, ProgramMenuFolder  (for the shortcuts)
    srcroot = str(project.input_root)
    root = Directory(db, cab, None, srcroot, "TARGETDIR", "SourceDir")
    pfiles = Directory(db, cab, root, srcroot, "ProgramFiles64Folder", "PFiles")
    installdir = Directory(db, cab, pfiles, srcroot, "INSTALLDIR", config.install_dir_name)
    desktop = Directory(db, cab, root, srcroot, "DesktopFolder", "Desktop")
    menu = Directory(db, cab, root, srcroot, "ProgramMenuFolder", "PMenu")

    features: Dict[str, Feature] = {}
    for display, feature in enumerate(project.features, start=1):
        features[feature.id] = Feature(db, feature.id, feature.title, feature.title, display,
                                       feature.level, directory="INSTALLDIR")

    # Main component, keyed on the settings app
    comp_id = "HTCC.Component"
    keyfile = next((f.name for f in main_files if f.name.lower() == config.settings_exe.lower()), None)
    installdir.start_component(comp_id, features[MAIN_FEATURE], COMPONENT_64BIT, keyfile=keyfile)
    file_keys: Dict[str, str] = {}
    for f in main_files:
        file_keys[f.name] = installdir.add_file(f.name, src=str(f.source))

    for feature in project.features:
        if feature.id == MAIN_FEATURE:
            continue
        extra = project.files_in(feature.id)
        if not extra:
            continue
        installdir.start_component(f"{feature.id}.Component", features[feature.id], COMPONENT_64BIT)
        for f in extra:
            file_keys[f.name] = installdir.add_file(f.name, src=str(f.source))

    shortcut_dirs = {"DesktopFolder": desktop, "ProgramMenuFolder": menu}
    shortcut_rows = []
    for index, shortcut in enumerate(project.shortcuts, start=1):
        if shortcut.target not in file_keys:
            raise MsiBuildError(f"Shortcut target {shortcut.target} is not a payload file")
        short = shortcut_dirs[shortcut.directory].make_short(shortcut.name)
        shortcut_rows.append((
            f"Shortcut{index}",                  # Shortcut (primary key)
            shortcut.directory,                  # Directory_
            f"{short}|{shortcut.name}",          # Name
            comp_id,                             # Component_
            f"[#{file_keys[shortcut.target]}]",  # Target
            None, None, None, None, None, None,  # Arguments .. ShowCmd
            "INSTALLDIR",                        # WkDir
        ))
    if shortcut_rows:
        msilib.add_data(db, "Shortcut", shortcut_rows)

    if project.registry:
        msilib.add_data(db, "Registry", [
            (f"Reg{index}", entry.root, entry.key, entry.name, entry.msi_value(), comp_id)
            for index, entry in enumerate(project.registry, start=1)
        ])

    if project.binaries:
        msilib.add_data(db, "Binary", [
            (key, msilib.Binary(str(path))) for key, path in project.binaries.items()
        ])

    if project.launch_conditions:
        msilib.add_data(db, "LaunchCondition", project.launch_conditions)

    for action in project.custom_actions:
        msilib.add_data(db, "CustomAction", [(action.id, action.type, action.source, action.target)])
        for table in action.tables:
            msilib.add_data(db, table, [(action.id, action.condition, _sequence_for(db, action, table))])

    # Finalize: write CAB (adds Media row) + commit DB
    cab.commit(db)
    db.Commit()
    return out_path
