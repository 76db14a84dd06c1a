from __future__ import annotations

import json
from typing import Any, Optional
import collections.abc

import yaml

from tabula.tabula_datatypes import Table


# --------------------------
# Helpers
# --------------------------

def _is_sequence(t: Table) -> bool:
    """True when the table's keys are exactly 1..n."""
    n = t.border()
    return len(t.data) == n


def to_builtin(value: Any, _seen: Optional[set] = None) -> Any:
    """Convert tables (recursively) into plain lists and dicts."""
    if not isinstance(value, Table):
        return value
    seen = _seen or set()
    if id(value) in seen:
        raise ValueError("cannot convert a table that contains itself")
    seen = seen | {id(value)}
    if _is_sequence(value):
        return [to_builtin(v, seen) for v in value.to_list()]
    return {k: to_builtin(v, seen) for k, v in value.items()}


def from_builtin(value: Any) -> Any:
    """Convert plain lists/tuples and mappings (recursively) into tables."""
    if isinstance(value, Table):
        return value
    if isinstance(value, (list, tuple)):
        return Table.from_sequence(from_builtin(v) for v in value)
    if isinstance(value, collections.abc.Mapping):
        t = Table()
        for k, v in value.items():
            t.raw_set(k, from_builtin(v))
        return t
    return value


def detect_format(data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns 'json' when the text looks like JSON, otherwise 'yaml'
    (YAML is a superset and the fallback for anything else).
    """
    if data_hint is None:
        return None
    s = data_hint.lstrip()
    if s.startswith('{') or s.startswith('['):
        return 'json'
    return 'yaml'


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str, *, fmt: Optional[str] = None) -> Any:
    """
    Convert JSON or YAML text into tables and scalars.
    If fmt is None, the format is sniffed from the text.
    """
    text = data.decode('utf-8', errors='replace') if isinstance(data, (bytes, bytearray)) else data
    f = (fmt or detect_format(text) or '').lower()
    if f == 'json':
        try:
            return from_builtin(json.loads(text))
        except json.JSONDecodeError:
            # Fallback to YAML if declared JSON but content is actually YAML-like
            return from_builtin(yaml.safe_load(text))
    if f == 'yaml':
        return from_builtin(yaml.safe_load(text))
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


def serialize(value: Any, *, fmt: str, pretty: bool = True) -> str:
    """
    Convert a table (or scalar) into JSON or YAML text.
    Sequence tables become arrays; any other table becomes an object.
    """
    f = (fmt or '').lower()
    built = to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
    "to_builtin",
    "from_builtin",
]
