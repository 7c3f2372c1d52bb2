"""
Installer Configuration

Static identity and registry layout of the HTCC installer. Everything the
build script and the installer-time custom actions need to agree on lives
here, so both sides read the same key paths and identifiers.

Example:
    from htcc_installer.config import DEFAULT_CONFIG
    print(DEFAULT_CONFIG.api_layers_key)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InstallerConfig:
    """
    Configuration shared by the MSI build and the custom actions.

    Attributes:
        product_name (str): Display name; also the default output file name.
        manufacturer (str): Manufacturer shown in Apps & Features.
        upgrade_code (str): Upgrade code shared by every HTCC release.
        install_dir_name (str): Folder created under Program Files.
        settings_exe (str): Main executable, required in ``bin/``.
        shortcut_name (str): Name of the Desktop and Programs menu shortcuts.
        install_dir_key (str): HKLM key receiving the ``InstallDir`` value.
        version_key (str): HKLM key receiving the version stamp values.
        api_layers_key (str): HKLM key listing implicit OpenXR API layers.
        api_layer_manifest (str): File name of HTCC's own layer manifest.
        ultraleap_layer_suffix (str): Value-name suffix of the Ultraleap layer.
        ultraleap_disable_env (str): Variable the OpenXR loader checks to
            disable the Ultraleap layer.
        actions_binary (str): Key of the action runner in the Binary table.
        actions_exe (str): File name of the built action runner.
    """
    product_name: str = "Hand Tracked Cockpit Clicking (HTCC)"
    manufacturer: str = "Fred Emmott"
    upgrade_code: str = "{2F0CD440-8D59-4572-AABE-A7B4E7FFCDCD}"
    install_dir_name: str = "HTCC"
    settings_exe: str = "HTCCSettings.exe"
    shortcut_name: str = "HTCC Settings"

    install_dir_key: str = r"SOFTWARE\Fred Emmott\HandTrackedCockpitClicking"
    version_key: str = r"SOFTWARE\Fred Emmott\HTCC\Version"
    api_layers_key: str = r"SOFTWARE\Khronos\OpenXR\1\ApiLayers\Implicit"
    api_layer_manifest: str = "APILayer.json"

    ultraleap_layer_suffix: str = "\\UltraleapHandTracking.json"
    ultraleap_disable_env: str = "DISABLE_XR_APILAYER_ULTRALEAP_HAND_TRACKING_1"

    actions_binary: str = "HTCCInstallerActions"
    actions_exe: str = "HTCCInstallerActions.exe"


DEFAULT_CONFIG = InstallerConfig()
