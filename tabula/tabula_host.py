"""
The reference host: the narrow value interface the collection library runs on.

It provides indexed get/set honouring capability hooks, raw access, the
native size oracle, the call and protected-call primitives, the native
less-than, and the argument-checking helpers that signal errors.
"""
import inspect
import os
import sys
from typing import Any, Optional, Tuple

from tabula.tabula_datatypes import (
    Table, ProtocolObject,
    CollectionTypeError, ArgumentError, CollectionRuntimeError,
)
from tabula.tabula_printer import type_name, is_number, format_number

# Default size of the host result area (values a single call may return).
DEFAULT_MAX_STACK = 1_000_000

# Script integers are 64-bit.
MAX_INTEGER = 2 ** 63 - 1
MIN_INTEGER = -2 ** 63

# Longest chain of '__index' / '__newindex' tables followed before giving up.
MAX_HOOK_CHAIN = 2000


class Host:
    """Handles all value access and calls on behalf of library code."""

    def __init__(self, max_stack: Optional[int] = None):
        if max_stack is None:
            env = os.environ.get("TABULA_MAX_STACK")
            max_stack = int(env) if env else DEFAULT_MAX_STACK
        self.max_stack = max_stack

    def _dbg(self, *parts):
        if os.environ.get("TABULA_DEBUG"):
            try:
                print("[DBG]", *parts, file=sys.stderr)
            except Exception:
                pass

    # --- Raw access ---

    def get_capabilities(self, value) -> Optional[Table]:
        """Returns the capability table attached to a value, if any."""
        if isinstance(value, (Table, ProtocolObject)):
            return value.meta
        return None

    def raw_get(self, obj, key):
        """Protocol-bypassing lookup; only tables have raw storage."""
        if not isinstance(obj, Table):
            raise CollectionTypeError(f"table expected, got {type_name(obj)}")
        return obj.raw_get(key)

    def raw_len(self, obj) -> int:
        """The native size oracle."""
        if not isinstance(obj, Table):
            raise CollectionTypeError(f"table expected, got {type_name(obj)}")
        return obj.border()

    def get_hook(self, obj, event: str):
        caps = self.get_capabilities(obj)
        if caps is None:
            return None
        return caps.raw_get(event)

    # --- Indexed access ---

    async def get_index(self, obj, key):
        """obj[key], following '__index' hooks for absent slots."""
        for _ in range(MAX_HOOK_CHAIN):
            if isinstance(obj, Table):
                value = obj.raw_get(key)
                if value is not None:
                    return value
                hook = self.get_hook(obj, "__index")
                if hook is None:
                    return None
            else:
                hook = self.get_hook(obj, "__index")
                if hook is None:
                    raise CollectionTypeError(f"attempt to index a {type_name(obj)} value")
            if isinstance(hook, (Table, ProtocolObject)):
                obj = hook
                continue
            return await self.call(hook, obj, key)
        raise CollectionRuntimeError("'__index' chain too long; possible loop")

    async def set_index(self, obj, key, value):
        """obj[key] = value, following '__newindex' hooks for absent slots."""
        for _ in range(MAX_HOOK_CHAIN):
            if isinstance(obj, Table):
                if obj.raw_get(key) is not None:
                    obj.raw_set(key, value)
                    return
                hook = self.get_hook(obj, "__newindex")
                if hook is None:
                    obj.raw_set(key, value)
                    return
            else:
                hook = self.get_hook(obj, "__newindex")
                if hook is None:
                    raise CollectionTypeError(f"attempt to index a {type_name(obj)} value")
            if isinstance(hook, (Table, ProtocolObject)):
                obj = hook
                continue
            await self.call(hook, obj, key, value)
            return
        raise CollectionRuntimeError("'__newindex' chain too long; possible loop")

    # --- Calls ---

    async def call(self, func, *args):
        """Calls a host callable (plain or coroutine function) with args."""
        if not callable(func):
            raise CollectionTypeError(f"attempt to call a {type_name(func)} value")
        self._dbg("Host.call", getattr(func, "__name__", type(func).__name__), "argc", len(args))
        if inspect.iscoroutinefunction(func):
            return await func(*args)
        result = func(*args)
        if inspect.isawaitable(result):
            return await result
        return result

    async def pcall(self, func, *args) -> Tuple[bool, Any]:
        """Protected call: returns (True, result) or (False, exception)."""
        try:
            return True, await self.call(func, *args)
        except Exception as e:
            self._dbg("Host.pcall failed", type(e).__name__, str(e))
            return False, e

    def check_stack(self, n: int) -> bool:
        """True when the result area can hold n more values."""
        return 0 <= n <= self.max_stack

    # --- Comparison ---

    @staticmethod
    def to_bool(value) -> bool:
        """Script truthiness: only nil and false are false."""
        return value is not None and value is not False

    async def less_than(self, a, b) -> bool:
        """The native '<' on two values."""
        if is_number(a) and is_number(b):
            return a < b
        if isinstance(a, str) and isinstance(b, str):
            return a < b
        hook = self.get_hook(a, "__lt")
        if hook is None:
            hook = self.get_hook(b, "__lt")
        if hook is not None:
            return self.to_bool(await self.call(hook, a, b))
        t1, t2 = type_name(a), type_name(b)
        if t1 == t2:
            raise CollectionTypeError(f"attempt to compare two {t1} values")
        raise CollectionTypeError(f"attempt to compare {t1} with {t2}")

    # --- Argument checking ---

    def arg_error(self, arg: int, fname: str, extramsg: str, exc=ArgumentError):
        raise exc(f"bad argument #{arg} to '{fname}' ({extramsg})")

    def type_error(self, arg: int, fname: str, expected: str, value):
        self.arg_error(arg, fname, f"{expected} expected, got {type_name(value)}", CollectionTypeError)

    def check_integer(self, value, arg: int, fname: str) -> int:
        if isinstance(value, bool):
            self.type_error(arg, fname, "number", value)
        if isinstance(value, str):
            converted = str_to_number(value)
            if converted is None:
                self.type_error(arg, fname, "number", value)
            value = converted
        if isinstance(value, float):
            if not value.is_integer():
                self.arg_error(arg, fname, "number has no integer representation")
            value = int(value)
        if isinstance(value, int):
            if not MIN_INTEGER <= value <= MAX_INTEGER:
                self.arg_error(arg, fname, "number has no integer representation")
            return value
        self.type_error(arg, fname, "number", value)

    def opt_integer(self, value, default: int, arg: int, fname: str) -> int:
        if value is None:
            return default
        return self.check_integer(value, arg, fname)

    def opt_string(self, value, default: str, arg: int, fname: str) -> str:
        if value is None:
            return default
        if isinstance(value, str):
            return value
        if is_number(value):
            return format_number(value)
        self.type_error(arg, fname, "string", value)


def str_to_number(text: str):
    """Converts a numeric string (decimal, hex or float) to a number, else None."""
    s = text.strip()
    if not s or "inf" in s.lower() or "nan" in s.lower():
        return None
    try:
        return int(s, 10)
    except ValueError:
        pass
    if s.lstrip("+-").lower().startswith("0x"):
        try:
            return int(s, 16)
        except ValueError:
            return None
    try:
        return float(s)
    except ValueError:
        return None


__all__ = [
    "Host",
    "str_to_number",
    "DEFAULT_MAX_STACK",
    "MAX_INTEGER",
    "MIN_INTEGER",
    "MAX_HOOK_CHAIN",
]
