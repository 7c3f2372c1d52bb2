# winreg_store is Windows only and is imported where it is used.
from .api_layers import (
    REG_BINARY,
    REG_DWORD,
    REG_EXPAND_SZ,
    REG_MULTI_SZ,
    REG_QWORD,
    REG_SZ,
    ApiLayerKey,
    ApiLayerStore,
    RegistryValue,
)
from .memory_store import InMemoryApiLayerKey, InMemoryApiLayerStore

__all__ = [
    "REG_BINARY",
    "REG_DWORD",
    "REG_EXPAND_SZ",
    "REG_MULTI_SZ",
    "REG_QWORD",
    "REG_SZ",
    "ApiLayerKey",
    "ApiLayerStore",
    "RegistryValue",
    "InMemoryApiLayerKey",
    "InMemoryApiLayerStore",
]
