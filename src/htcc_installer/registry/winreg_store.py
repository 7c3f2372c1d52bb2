"""
``winreg`` backed API layer store. Windows only; import lazily.
"""

from __future__ import annotations

import winreg
from typing import List, Optional

from .api_layers import ApiLayerKey, ApiLayerStore, RegistryValue


class WinRegApiLayerKey(ApiLayerKey):
    def __init__(self, handle: winreg.HKEYType) -> None:
        self._handle = handle

    def value_names(self) -> List[str]:
        _subkeys, value_count, _modified = winreg.QueryInfoKey(self._handle)
        return [winreg.EnumValue(self._handle, i)[0] for i in range(value_count)]

    def read(self, name: str) -> RegistryValue:
        data, value_type = winreg.QueryValueEx(self._handle, name)
        return RegistryValue(data, value_type)

    def delete(self, name: str) -> None:
        winreg.DeleteValue(self._handle, name)

    def write(self, name: str, value: RegistryValue) -> None:
        winreg.SetValueEx(self._handle, name, 0, value.value_type, value.data)

    def close(self) -> None:
        self._handle.Close()


class WinRegApiLayerStore(ApiLayerStore):
    """
    Opens keys under HKEY_LOCAL_MACHINE in the 64-bit registry view, which is
    where the x64 MSI writes HTCC's own layer registration.
    """

    def __init__(self, hive=winreg.HKEY_LOCAL_MACHINE, view: int = winreg.KEY_WOW64_64KEY) -> None:
        self.hive = hive
        self.view = view

    def open(self, key_path: str, writable: bool = True) -> Optional[ApiLayerKey]:
        access = winreg.KEY_QUERY_VALUE | self.view
        if writable:
            access |= winreg.KEY_SET_VALUE
        try:
            handle = winreg.OpenKey(self.hive, key_path, 0, access)
        except FileNotFoundError:
            return None
        return WinRegApiLayerKey(handle)
