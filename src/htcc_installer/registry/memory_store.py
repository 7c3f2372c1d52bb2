from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple

from .api_layers import REG_DWORD, ApiLayerKey, ApiLayerStore, RegistryValue


class InMemoryApiLayerKey(ApiLayerKey):
    """Ordered value list with the same ordering rules as a registry key."""

    def __init__(self, values: "OrderedDict[str, RegistryValue]", writable: bool = True) -> None:
        self._values = values
        self._writable = writable
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise OSError("registry key handle is closed")

    def _check_writable(self) -> None:
        self._check_open()
        if not self._writable:
            raise PermissionError("registry key was opened read-only")

    def value_names(self) -> List[str]:
        self._check_open()
        return list(self._values.keys())

    def read(self, name: str) -> RegistryValue:
        self._check_open()
        try:
            return self._values[name]
        except KeyError:
            raise FileNotFoundError(f"registry value not found: {name}")

    def delete(self, name: str) -> None:
        self._check_writable()
        try:
            del self._values[name]
        except KeyError:
            raise FileNotFoundError(f"registry value not found: {name}")

    def write(self, name: str, value: RegistryValue) -> None:
        # Overwriting an existing value keeps its position, new values go last
        self._check_writable()
        self._values[name] = value

    def close(self) -> None:
        self.closed = True


class InMemoryApiLayerStore(ApiLayerStore):
    """
    Registry stand-in for tests and dry runs.

    Attributes:
        keys (dict): key path -> ordered mapping of value name to value.
        opened (list): every key handle handed out, for release checks.
    """

    def __init__(self, keys: Optional[Dict[str, "OrderedDict[str, RegistryValue]"]] = None) -> None:
        self.keys: Dict[str, "OrderedDict[str, RegistryValue]"] = keys or {}
        self.opened: List[InMemoryApiLayerKey] = []

    @classmethod
    def with_layers(cls, key_path: str, layers: Iterable[Tuple[str, int]]) -> "InMemoryApiLayerStore":
        values: "OrderedDict[str, RegistryValue]" = OrderedDict()
        for name, enabled_flag in layers:
            values[name] = RegistryValue(enabled_flag, REG_DWORD)
        return cls({key_path: values})

    def open(self, key_path: str, writable: bool = True) -> Optional[ApiLayerKey]:
        values = self.keys.get(key_path)
        if values is None:
            return None
        key = InMemoryApiLayerKey(values, writable)
        self.opened.append(key)
        return key

    def layers(self, key_path: str) -> List[Tuple[str, object]]:
        return [(name, value.data) for name, value in self.keys.get(key_path, {}).items()]
