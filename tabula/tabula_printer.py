"""
A printer for tabula values: type names, host string conversion, and a
readable literal form for tables.
"""
import re

from tabula.tabula_datatypes import Table, ProtocolObject

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def type_name(value) -> str:
    """Returns the script-level type name of a value."""
    if value is None: return "nil"
    if isinstance(value, bool): return "boolean"
    if isinstance(value, (int, float)): return "number"
    if isinstance(value, str): return "string"
    if isinstance(value, Table): return "table"
    if isinstance(value, ProtocolObject): return "userdata"
    if callable(value): return "function"
    return "userdata"


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value) -> str:
    """Renders a number the way the host does (integers plainly, floats as %.14g)."""
    if isinstance(value, int):
        return str(value)
    s = "%.14g" % value
    # Keep integral floats distinguishable from integers: 3.0, not 3
    if re.fullmatch(r"-?\d+", s):
        s += ".0"
    return s


class Printer:
    """Formats tabula values into readable, table-literal strings."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def tostring(self, value) -> str:
        """Host string conversion for strings and numbers; None for anything else."""
        if isinstance(value, str):
            return value
        if is_number(value):
            return format_number(value)
        return None

    def pformat(self, obj) -> str:
        """Public entry point to format an object."""
        return self._format(obj, set())

    def _format(self, obj, seen):
        handler = self._handlers.get(type(obj))
        if handler is None:
            if isinstance(obj, Table):
                handler = self._pformat_table
            elif isinstance(obj, str):
                handler = self._pformat_str
            else:
                return f"<{type_name(obj)}>"
        return handler(obj, seen)

    def _create_handlers(self):
        return {
            type(None): lambda o, s: "nil",
            bool: lambda o, s: "true" if o else "false",
            int: lambda o, s: format_number(o),
            float: lambda o, s: format_number(o),
            str: self._pformat_str,
            Table: self._pformat_table,
        }

    def _pformat_str(self, obj, seen):
        escaped = obj.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'

    def _pformat_key(self, key, seen):
        if isinstance(key, str) and _IDENT.match(key):
            return key
        return f"[{self._format(key, seen)}]"

    def _pformat_table(self, obj, seen):
        if id(obj) in seen:
            return "{...}"
        seen = seen | {id(obj)}
        n = obj.border()
        parts = [self._format(obj.raw_get(i), seen) for i in range(1, n + 1)]
        for key, value in obj.items():
            if isinstance(key, int) and not isinstance(key, bool) and 1 <= key <= n:
                continue
            parts.append(f"{self._pformat_key(key, seen)} = {self._format(value, seen)}")
        if not parts:
            return "{}"
        return "{" + ", ".join(parts) + "}"
