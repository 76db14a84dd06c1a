from tabula.tabula_datatypes import (
    Table, ProtocolObject, Capability,
    ScriptError, CollectionTypeError, ArgumentError, CollectionRuntimeError,
)
from tabula.tabula_host import Host
from tabula.tabula_runtime import TableLib, open_table_lib
from tabula.tabula_printer import Printer
from tabula.tabula_serialize import serialize, deserialize, to_builtin, from_builtin

__all__ = [
    "Table",
    "ProtocolObject",
    "Capability",
    "ScriptError",
    "CollectionTypeError",
    "ArgumentError",
    "CollectionRuntimeError",
    "Host",
    "TableLib",
    "open_table_lib",
    "Printer",
    "serialize",
    "deserialize",
    "to_builtin",
    "from_builtin",
]
