"""
Import of ``.reg`` files into MSI registry rows.

Game-specific configuration ships as regedit exports in ``installer/*.reg``;
they are turned into Registry table rows so the MSI owns (and removes) them.

Supported: ``REGEDIT4`` and ``Windows Registry Editor Version 5.00`` files
in UTF-16 or UTF-8, string, ``dword:``, ``hex:``, ``hex(2):`` (expandable
string), ``hex(4):`` and ``hex(7):`` (multi-string) values, ``@`` default
values and ``\\`` line continuations. Deletions and QWORDs have no MSI
Registry table equivalent and are rejected.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from htcc_installer.errors import RegFileError
from htcc_installer.file_operations import FileManager
from htcc_installer.packaging.entries import HKCR, HKCU, HKLM, HKU, RegistryEntry
from htcc_installer.registry import REG_BINARY, REG_DWORD, REG_EXPAND_SZ, REG_MULTI_SZ, REG_SZ

HEADER_V5 = "Windows Registry Editor Version 5.00"
HEADER_V4 = "REGEDIT4"

HIVES = {
    "HKEY_CLASSES_ROOT": HKCR,
    "HKCR": HKCR,
    "HKEY_CURRENT_USER": HKCU,
    "HKCU": HKCU,
    "HKEY_LOCAL_MACHINE": HKLM,
    "HKLM": HKLM,
    "HKEY_USERS": HKU,
    "HKU": HKU,
}


def _logical_lines(text: str) -> List[str]:
    lines = []
    pending = ""
    for raw in text.splitlines():
        line = raw.strip()
        if pending:
            line = pending + line
            pending = ""
        if line.endswith("\\"):
            pending = line[:-1]
            continue
        lines.append(line)
    if pending:
        lines.append(pending)
    return lines


def _parse_quoted(line: str, start: int) -> Tuple[str, int]:
    """Parse a regedit quoted string at ``line[start]``; return (text, index after closing quote)."""
    if start >= len(line) or line[start] != '"':
        raise RegFileError(f"expected '\"' in: {line}")
    out = []
    i = start + 1
    while i < len(line):
        ch = line[i]
        if ch == "\\" and i + 1 < len(line):
            out.append(line[i + 1])
            i += 2
            continue
        if ch == '"':
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    raise RegFileError(f"unterminated string in: {line}")


def _parse_key(line: str) -> Tuple[int, str]:
    path = line[1:-1]
    if path.startswith("-"):
        raise RegFileError(f"key deletion is not supported: {path[1:]}")
    hive_name, _, key = path.partition("\\")
    if hive_name.upper() not in HIVES:
        raise RegFileError(f"unknown registry hive: {hive_name}")
    return HIVES[hive_name.upper()], key


def _hex_bytes(text: str) -> bytes:
    parts = [p.strip() for p in text.split(",") if p.strip()]
    try:
        return bytes(int(p, 16) for p in parts)
    except ValueError:
        raise RegFileError(f"invalid hex data: {text}")


def _decode_string(data: bytes, unicode: bool) -> str:
    text = data.decode("utf-16-le") if unicode else data.decode("cp1252")
    return text.rstrip("\0")


def _parse_data(data: str, unicode: bool) -> Tuple[object, int]:
    if data.startswith('"'):
        text, end = _parse_quoted(data, 0)
        if data[end:].strip():
            raise RegFileError(f"unexpected trailing data: {data}")
        return text, REG_SZ

    if data == "-":
        raise RegFileError("value deletion is not supported")

    kind, sep, payload = data.partition(":")
    if not sep:
        raise RegFileError(f"unrecognised value data: {data}")
    kind = kind.lower()

    if kind == "dword":
        try:
            return int(payload, 16), REG_DWORD
        except ValueError:
            raise RegFileError(f"invalid dword: {payload}")
    if kind == "hex":
        return _hex_bytes(payload), REG_BINARY
    if kind == "hex(2)":
        return _decode_string(_hex_bytes(payload), unicode), REG_EXPAND_SZ
    if kind == "hex(4)":
        return int.from_bytes(_hex_bytes(payload), "little"), REG_DWORD
    if kind == "hex(7)":
        text = _decode_string(_hex_bytes(payload), unicode)
        return [item for item in text.split("\0") if item], REG_MULTI_SZ
    raise RegFileError(f"unsupported value type: {kind}")


def parse_reg(text: str, source: str = "<string>") -> List[RegistryEntry]:
    lines = [line for line in _logical_lines(text) if line and not line.startswith(";")]
    if not lines:
        raise RegFileError(f"{source}: empty registry file")

    header = lines[0]
    if header not in (HEADER_V5, HEADER_V4):
        raise RegFileError(f"{source}: not a registry export (header {header!r})")
    unicode = header == HEADER_V5

    entries: List[RegistryEntry] = []
    current: Optional[Tuple[int, str]] = None
    for line in lines[1:]:
        try:
            if line.startswith("[") and line.endswith("]"):
                current = _parse_key(line)
                continue

            if current is None:
                raise RegFileError(f"value outside of a key: {line}")

            if line.startswith("@"):
                name, rest = None, line[1:]
            else:
                name, end = _parse_quoted(line, 0)
                rest = line[end:]
            rest = rest.lstrip()
            if not rest.startswith("="):
                raise RegFileError(f"expected '=' in: {line}")

            value, value_type = _parse_data(rest[1:].strip(), unicode)
        except RegFileError as e:
            raise RegFileError(f"{source}: {e}")

        root, key = current
        entries.append(RegistryEntry(root, key, name, value, value_type))
    return entries


def load_reg_file(path: Path) -> List[RegistryEntry]:
    return parse_reg(FileManager.read_text_guess_encoding(path), source=str(path))
