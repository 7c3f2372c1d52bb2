"""
API Layer Registry Gateway

The OpenXR loader reads implicit API layers from a single registry key: each
value name is a layer manifest path, each value's data is a DWORD that is 0
when the layer is enabled. The loader activates layers in value-enumeration
order, which on Windows is insertion order.

This module models that key as an ordered mapping behind a narrow gateway
(``ApiLayerStore.open`` returning an ``ApiLayerKey``), so the custom actions
never touch ``winreg`` directly and can be exercised against an in-memory
store.

Example:
    with store.open(DEFAULT_CONFIG.api_layers_key) as key:
        for name in key.value_names():
            print(name, key.read(name).data)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

# Same numbers as winreg.REG_*; winreg is only importable on Windows.
REG_SZ = 1
REG_EXPAND_SZ = 2
REG_BINARY = 3
REG_DWORD = 4
REG_MULTI_SZ = 7
REG_QWORD = 11


@dataclass(frozen=True)
class RegistryValue:
    data: Any
    value_type: int = REG_DWORD


class ApiLayerKey(ABC):
    """
    An open registry key. Use as a context manager so the handle is released
    on every exit path.
    """

    @abstractmethod
    def value_names(self) -> List[str]:
        """Snapshot of the value names, in enumeration order."""

    @abstractmethod
    def read(self, name: str) -> RegistryValue:
        ...

    @abstractmethod
    def delete(self, name: str) -> None:
        ...

    @abstractmethod
    def write(self, name: str, value: RegistryValue) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def move_to_end(self, name: str) -> RegistryValue:
        """
        Move a value to the end of the enumeration order without changing
        its data or type.

        There is no native move primitive, so this deletes the value and
        immediately writes it back; the re-add must follow the delete
        directly so an interruption never loses more than this one value.
        """
        value = self.read(name)
        self.delete(name)
        self.write(name, value)
        return value

    def __enter__(self) -> "ApiLayerKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ApiLayerStore(ABC):
    @abstractmethod
    def open(self, key_path: str, writable: bool = True) -> Optional[ApiLayerKey]:
        """Open ``key_path``; return None when the key does not exist."""
