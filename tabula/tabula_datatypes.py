"""
Defines the core data types for the tabula collection runtime.

This module provides the native indexed collection (`Table`), the
capability-backed stand-in (`ProtocolObject`), the capability flags used by
the collection library, and the script-visible error hierarchy.
"""

import enum
import math
from typing import Any, Dict, Iterator, Optional, Tuple


# =================================================================
# Errors
# =================================================================

class ScriptError(Exception):
    """Base class for every error signaled to host script code."""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CollectionTypeError(ScriptError, TypeError):
    """A value has the wrong type for the operation (not a table, bad element)."""
    kind = "type-error"


class ArgumentError(ScriptError, ValueError):
    """An argument violates its documented bounds or the arity is wrong."""
    kind = "argument-error"


class CollectionRuntimeError(ScriptError, RuntimeError):
    """A structural limit was exceeded or a host callback failed."""
    kind = "runtime-error"


# =================================================================
# Capabilities
# =================================================================

class Capability(enum.IntFlag):
    """Operations an argument must support to take part in a call."""
    NONE = 0
    READ = 1
    WRITE = 2
    LENGTH = 4
    READ_WRITE = READ | WRITE


# Hook names consulted on a capability table; each hook is looked up when any
# of its capabilities is required. Reading a list needs its length too.
CAPABILITY_HOOKS: Tuple[Tuple[Capability, str], ...] = (
    (Capability.READ, "__index"),
    (Capability.WRITE, "__newindex"),
    (Capability.READ | Capability.LENGTH, "__len"),
)


# =================================================================
# Keys
# =================================================================

class _BoolKey:
    """Wraps a boolean key so that True/False do not collide with 1/0."""
    __slots__ = ("value",)

    def __init__(self, value: bool):
        self.value = value

    def __repr__(self):
        return f"_BoolKey({self.value!r})"


_TRUE_KEY = _BoolKey(True)
_FALSE_KEY = _BoolKey(False)


def normalize_key(key: Any) -> Any:
    """Map a script key to its storage key.

    Integral floats address the integer slot; booleans are boxed so they stay
    distinct from 1 and 0. `None` and NaN are not valid keys.
    """
    if key is None:
        raise CollectionRuntimeError("index is nil")
    if isinstance(key, bool):
        return _TRUE_KEY if key else _FALSE_KEY
    if isinstance(key, float):
        if math.isnan(key):
            raise CollectionRuntimeError("index is NaN")
        if key.is_integer():
            return int(key)
    return key


def _denormalize_key(key: Any) -> Any:
    if isinstance(key, _BoolKey):
        return key.value
    return key


# =================================================================
# Collections
# =================================================================

class Table:
    """The native indexed collection.

    A key/value mapping whose "list" part lives at the integer keys 1..n.
    `None` is the absent value: reading a missing key yields `None` and
    storing `None` removes the key. `meta` optionally holds a capability
    table whose hooks the host consults for missing behaviour.

    All item access on a Table is raw: capability hooks are only honoured
    when going through the host (`Host.get_index` / `Host.set_index`).
    """
    def __init__(self, items: Optional[Dict[Any, Any]] = None, meta: Optional['Table'] = None):
        self.data: Dict[Any, Any] = {}
        self.meta = meta
        if items:
            for key, value in items.items():
                self.raw_set(key, value)

    @classmethod
    def from_sequence(cls, values, meta: Optional['Table'] = None) -> 'Table':
        """Builds a table holding `values` at keys 1, 2, ..."""
        t = cls(meta=meta)
        for i, value in enumerate(values, start=1):
            t.raw_set(i, value)
        return t

    def raw_get(self, key: Any) -> Any:
        if key is None:
            return None
        if isinstance(key, float) and math.isnan(key):
            return None
        return self.data.get(normalize_key(key))

    def raw_set(self, key: Any, value: Any):
        key = normalize_key(key)
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = value

    def border(self) -> int:
        """The native size oracle: largest n with keys 1..n all present."""
        n = 0
        data = self.data
        while (n + 1) in data:
            n += 1
        return n

    def to_list(self) -> list:
        """Values at keys 1..border, in order."""
        return [self.data[i] for i in range(1, self.border() + 1)]

    def keys(self) -> Iterator[Any]:
        return (_denormalize_key(k) for k in self.data.keys())

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return ((_denormalize_key(k), v) for k, v in self.data.items())

    def __getitem__(self, key: Any) -> Any:
        return self.raw_get(key)

    def __setitem__(self, key: Any, value: Any):
        self.raw_set(key, value)

    def __delitem__(self, key: Any):
        self.raw_set(key, None)

    def __contains__(self, key: Any) -> bool:
        return self.raw_get(key) is not None

    def __iter__(self) -> Iterator[Any]:
        return self.keys()

    def __len__(self) -> int:
        return self.border()

    def __bool__(self) -> bool:
        # A table is a value; it is never falsy, even when empty.
        return True

    def __repr__(self) -> str:
        from tabula.tabula_printer import Printer
        return Printer().pformat(self)


class ProtocolObject:
    """An opaque host object that can only mimic a table through hooks.

    It has no storage the library can see; reads, writes and length all go
    through the `__index`, `__newindex` and `__len` hooks of its `meta`
    capability table. `payload` is free for the host to use.
    """
    def __init__(self, payload: Any = None, meta: Optional[Table] = None):
        self.payload = payload
        self.meta = meta

    def __repr__(self) -> str:
        return f"<ProtocolObject #{id(self):x} payload={type(self.payload).__name__}>"
