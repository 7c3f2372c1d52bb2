from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from htcc_installer.registry import (
    REG_BINARY,
    REG_DWORD,
    REG_EXPAND_SZ,
    REG_MULTI_SZ,
    REG_SZ,
)

# Registry.Root column values
HKCR, HKCU, HKLM, HKU = 0, 1, 2, 3


@dataclass(frozen=True)
class RegistryEntry:
    root: int
    key: str
    name: Optional[str]
    value: Any
    value_type: int = REG_SZ

    def msi_value(self) -> Optional[str]:
        """Encode the value the way the MSI Registry table expects it."""
        if self.value is None:
            return None
        if self.value_type == REG_DWORD:
            return f"#{int(self.value)}"
        if self.value_type == REG_EXPAND_SZ:
            return f"#%{self.value}"
        if self.value_type == REG_BINARY:
            return "#x" + bytes(self.value).hex().upper()
        if self.value_type == REG_MULTI_SZ:
            # Delimiters on both ends mark the value as REG_MULTI_SZ even with 0 or 1 items
            return "[~]" + "[~]".join(self.value) + "[~]"
        text = str(self.value)
        # A leading '#' would otherwise be read as a type prefix
        if text.startswith("#"):
            return "#" + text
        return text
