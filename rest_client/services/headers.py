"""
Case-insensitive header helpers.

Header dictionaries keep the casing the user or server used, so every
presence test and lookup goes through these helpers.
"""

import re
from collections.abc import Iterable, Mapping


_HEADER_WORD = re.compile(r"[^-]+")


def find_header_name(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Return the key under which ``name`` is stored, ignoring case."""
    if not headers:
        return None
    lowered = name.lower()
    for key in headers:
        if key.lower() == lowered:
            return key
    return None


def has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    return find_header_name(headers, name) is not None


def get_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    key = find_header_name(headers, name)
    return headers[key] if key is not None else None


def capitalize_header_name(name: str) -> str:
    """
    Uppercase the first letter of every hyphen-separated word.

    Example:
        >>> capitalize_header_name("content-type")
        'Content-Type'
    """
    return _HEADER_WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:], name)


def capitalize_header_names(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {capitalize_header_name(name): value for name, value in headers.items()}


def raw_header_names(raw_names: Iterable[str]) -> dict[str, str]:
    """Map each lowercased header name to the casing seen on the wire."""
    return {name.lower(): name for name in raw_names}


def restore_header_case(
    headers: Mapping[str, str],
    raw_names: Iterable[str]
) -> dict[str, str]:
    """
    Restore the original casing of header names.

    Names missing from the raw list keep the form they were given in.
    Restoring an already correctly cased mapping returns it unchanged.
    """
    casing = raw_header_names(raw_names)
    return {casing.get(name.lower(), name): value for name, value in headers.items()}
