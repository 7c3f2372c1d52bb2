"""
Version descriptor (``installer/version.json``) handling.

The descriptor is produced by the application build and looks like::

    {
      "components": {"a": 1, "b": 2, "c": 3, "d": 456},
      "readable": "1.2.3-beta.1",
      "tweakLabel": "beta",
      "stable": false,
      "tagged": false
    }

Key lookup is case-insensitive, so ``TweakLabel`` and ``tweaklabel`` are
accepted as well.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from htcc_installer.errors import VersionDescriptorError
from htcc_installer.file_operations import FileManager

VERSION_FILE = Path("installer") / "version.json"

# Windows Installer ProductVersion limits; the fourth field gets the same 16 bits as build
COMPONENT_LIMITS = {"a": 255, "b": 255, "c": 65535, "d": 65535}


@dataclass(frozen=True)
class VersionDescriptor:
    components: Tuple[int, int, int, int]
    readable: str = ""
    tweak_label: str = ""
    stable: bool = False
    tagged: bool = False

    @property
    def triple(self) -> str:
        a, b, c, _d = self.components
        return f"{a}.{b}.{c}"

    @property
    def quad(self) -> str:
        return ".".join(str(part) for part in self.components)

    def out_file_suffix(self) -> str:
        """Suffix appended to the installer file name, e.g. ``-v1.2.3+beta.456``."""
        suffix = f"-v{self.triple}"
        if not self.tagged:
            suffix += f"+{self.tweak_label}.{self.components[3]}"
        return suffix

    def registry_values(self) -> List[Tuple[str, Any]]:
        """Name/data pairs for the version stamp key; ints are written as DWORDs."""
        a, b, c, d = self.components
        return [
            ("Semantic", self.readable),
            ("Readable", f"v{self.readable}"),
            ("Major", a),
            ("Minor", b),
            ("Build", c),
            ("Tweak", d),
            ("Triple", self.triple),
            ("Quad", self.quad),
        ]


def _lower_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def parse_version_descriptor(data: Dict[str, Any]) -> VersionDescriptor:
    if not isinstance(data, dict):
        raise VersionDescriptorError("version descriptor must be a JSON object")
    fields = _lower_keys(data)

    raw_components = fields.get("components")
    if not isinstance(raw_components, dict):
        raise VersionDescriptorError("version descriptor has no 'components' object")
    raw_components = _lower_keys(raw_components)

    components = []
    for name in ("a", "b", "c", "d"):
        value = raw_components.get(name, 0)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise VersionDescriptorError(f"version component '{name}' must be a non-negative integer, got {value!r}")
        if value > COMPONENT_LIMITS[name]:
            raise VersionDescriptorError(f"version component '{name}' is {value}, above the installer limit of {COMPONENT_LIMITS[name]}")
        components.append(value)

    return VersionDescriptor(
        components=(components[0], components[1], components[2], components[3]),
        readable=str(fields.get("readable", "")),
        tweak_label=str(fields.get("tweaklabel", "")),
        stable=bool(fields.get("stable", False)),
        tagged=bool(fields.get("tagged", False)),
    )


def load_version_descriptor(input_root: Path) -> VersionDescriptor:
    path = input_root / VERSION_FILE
    try:
        data = json.loads(FileManager.read_file(path))
    except FileNotFoundError:
        raise VersionDescriptorError(f"Cannot find {VERSION_FILE.as_posix()} in INPUT_ROOT ({input_root})")
    except json.JSONDecodeError as e:
        raise VersionDescriptorError(f"Invalid JSON in {path}: {e}")
    return parse_version_descriptor(data)
