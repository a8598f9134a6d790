"""Header helpers: normalize caller input, merge defaults with overrides, parse raw blocks.

Headers may be given as a mapping (keyed entries) or as a sequence of
pre-formatted ``"Name: Value"`` strings and ``(name, value)`` pairs. In a
mapping, an integer key marks its value as a pre-formatted line, so
``{0: "X-Raw: v", "X": "b"}`` mixes both kinds. Keyed entries replace
same-named earlier entries; pre-formatted strings are kept verbatim and never
replace anything.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple, Union

from batchhttp.domain.errors import InvalidInputError

HeaderInput = Union[Mapping[Union[str, int], str], Sequence[Union[str, Tuple[str, str]]]]
HeaderEntry = Tuple[Optional[str], str]


def header_entries(headers: HeaderInput | None) -> list[HeaderEntry]:
    """Flatten caller headers to ``(name, value)`` entries; name is None for pre-formatted lines."""
    if not headers:
        return []
    if isinstance(headers, Mapping):
        entries: list[HeaderEntry] = []
        for name, value in headers.items():
            if isinstance(name, int) and not isinstance(name, bool):
                entries.append((None, _checked_line(value)))
            else:
                entries.append((_checked_name(name), str(value)))
        return entries
    if isinstance(headers, (str, bytes)):
        raise InvalidInputError("headers must be a mapping or a sequence of header lines")

    entries = []
    for item in headers:
        if isinstance(item, str):
            entries.append((None, _checked_line(item)))
        elif isinstance(item, tuple) and len(item) == 2:
            entries.append((_checked_name(item[0]), str(item[1])))
        else:
            raise InvalidInputError(f"unsupported header entry: {item!r}")
    return entries


def freeze_headers(headers: HeaderInput | None) -> HeaderInput:
    """Validate caller headers and return a read-only copy of the same shape."""
    header_entries(headers)
    if not headers:
        return MappingProxyType({})
    if isinstance(headers, Mapping):
        return MappingProxyType(dict(headers))
    return tuple(headers)


def merge_headers(defaults: HeaderInput | None, overrides: HeaderInput | None) -> list[str]:
    """Merge two header sets into ``"Name: Value"`` lines; overrides win, names compare case-insensitively."""
    merged: list[HeaderEntry] = []
    positions: dict[str, int] = {}
    for name, value in header_entries(defaults) + header_entries(overrides):
        if name is None:
            merged.append((None, value))
            continue
        key = name.lower()
        if key in positions:
            merged[positions[key]] = (name, value)
        else:
            positions[key] = len(merged)
            merged.append((name, value))
    return [value if name is None else f"{name}: {value}" for name, value in merged]


def split_header_line(line: str) -> tuple[str, str] | None:
    """Split ``"Name: value"``; None when the line has no colon."""
    if ":" not in line:
        return None
    name, value = line.split(":", 1)
    return name.strip(), value.strip()


def has_header(lines: Sequence[str], name: str) -> bool:
    wanted = name.lower()
    for line in lines:
        parts = split_header_line(line)
        if parts is not None and parts[0].lower() == wanted:
            return True
    return False


def parse_header_block(block: str) -> dict[str, str]:
    """Parse a raw header block. Status lines and other lines without a colon are skipped."""
    headers: dict[str, str] = {}
    for line in block.splitlines():
        parts = split_header_line(line)
        if parts is None:
            continue
        headers[parts[0]] = parts[1]
    return headers


def _checked_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError(f"header name must be a non-empty string, got {name!r}")
    return name


def _checked_line(line: object) -> str:
    if not isinstance(line, str) or ":" not in line:
        raise InvalidInputError(f"malformed header line: {line!r}")
    return line
