# tabula_runtime.py

import inspect
from dataclasses import dataclass
from typing import Any, Optional

from tabula.tabula_datatypes import (
    Table, Capability, CAPABILITY_HOOKS,
    ArgumentError, CollectionTypeError, CollectionRuntimeError,
)
from tabula.tabula_host import Host, MAX_INTEGER
from tabula.tabula_printer import Printer, type_name, is_number
from tabula.tabula_sort import TableSorter

# ===================================================================
# 1. Limits
# ===================================================================

# Hard cap on the number of values `unpack` may produce.
MAX_RESULTS = 1_000_000

# Largest border `sort` accepts.
MAX_SORT_SIZE = 2 ** 31 - 1


def table_api_method(func):
    """A decorator to mark methods exported into the collection namespace."""
    func._is_table_api = True
    return func


# ===================================================================
# 2. Per-operation options, resolved once at entry
# ===================================================================

@dataclass
class ConcatOptions:
    sep: str = ""
    i: int = 1
    j: Optional[int] = None


@dataclass
class UnpackOptions:
    i: int = 1
    j: Optional[int] = None

    @property
    def count(self) -> int:
        return self.j - self.i + 1


@dataclass
class MoveOptions:
    f: int
    e: int
    t: int
    dest: Any = None

    @property
    def count(self) -> int:
        return self.e - self.f + 1


# ===================================================================
# 3. The collection library
# ===================================================================

class TableLib:
    """Python implementations of the collection utilities.

    All functions ignore non-numeric keys and read or write the collection
    only through the host, so a capability-backed object is treated exactly
    like a native table.
    """
    def __init__(self, host: Optional[Host] = None):
        self.host = host or Host()
        self.printer = Printer()

    # --- Capability checking and borders ---

    def check_capabilities(self, arg, required: Capability, argno: int = 1, fname: str = "?"):
        """Ensures `arg` is a table, or carries the hooks needed to act like one."""
        if isinstance(arg, Table):
            return
        caps = self.host.get_capabilities(arg)
        if caps is not None:
            missing = [hook for cap, hook in CAPABILITY_HOOKS
                       if (required & cap) and caps.raw_get(hook) is None]
            if not missing:
                return
            self.host._dbg("check_capabilities", fname, "missing", missing)
        self.host.type_error(argno, fname, "table", arg)

    async def border(self, arg, required: Capability, argno: int = 1, fname: str = "?") -> int:
        """The operative length of `arg` for the duration of one call."""
        self.check_capabilities(arg, required | Capability.LENGTH, argno, fname)
        if isinstance(arg, Table):
            return self.host.raw_len(arg)
        n = await self.host.call(self.host.get_hook(arg, "__len"), arg)
        if is_number(n) and float(n).is_integer():
            return int(n)
        raise CollectionTypeError("object length is not an integer")

    # --- Structural mutators ---

    @table_api_method
    async def insert(self, lst, *args):
        """insert(list, [pos,] value): inserts value at pos, shifting list[pos..] up."""
        host = self.host
        e = await self.border(lst, Capability.READ_WRITE, 1, "insert") + 1  # first empty element
        match len(args):
            case 1:
                pos = e
                value = args[0]
            case 2:
                pos = host.check_integer(args[0], 2, "insert")
                value = args[1]
                if pos < 1 or pos > e:
                    host.arg_error(2, "insert", "position out of bounds")
                for i in range(e, pos, -1):  # t[i] = t[i - 1]
                    await host.set_index(lst, i, await host.get_index(lst, i - 1))
            case _:
                raise ArgumentError("wrong number of arguments to 'insert'")
        host._dbg("insert", "pos", pos, "border", e - 1)
        await host.set_index(lst, pos, value)

    @table_api_method
    async def remove(self, lst, pos=None):
        """remove(list, [pos]): removes and returns list[pos], shifting the tail down."""
        host = self.host
        size = await self.border(lst, Capability.READ_WRITE, 1, "remove")
        pos = host.opt_integer(pos, size, 2, "remove")
        if pos != size and not (1 <= pos <= size + 1):
            host._dbg("remove", "no-op", "pos", pos, "border", size)
            return None
        result = await host.get_index(lst, pos)
        while pos < size:  # t[pos] = t[pos + 1]
            await host.set_index(lst, pos, await host.get_index(lst, pos + 1))
            pos += 1
        await host.set_index(lst, pos, None)
        return result

    @table_api_method
    async def move(self, a1, f, e, t, a2=None):
        """move(a1, f, e, t, [a2]): a2[t], ... = a1[f], ..., a1[e]; returns a2."""
        host = self.host
        opts = MoveOptions(
            f=host.check_integer(f, 2, "move"),
            e=host.check_integer(e, 3, "move"),
            t=host.check_integer(t, 4, "move"),
            dest=a1 if a2 is None else a2,
        )
        dest_argno = 1 if a2 is None else 5
        self.check_capabilities(a1, Capability.READ, 1, "move")
        self.check_capabilities(opts.dest, Capability.WRITE, dest_argno, "move")
        if opts.e < opts.f:  # nothing to move
            return opts.dest
        if not (opts.f > 0 or opts.e < MAX_INTEGER + opts.f):
            host.arg_error(3, "move", "too many elements to move")
        n = opts.count
        if opts.t > MAX_INTEGER - n + 1:
            host.arg_error(4, "move", "destination wrap around")
        host._dbg("move", "f", opts.f, "e", opts.e, "t", opts.t, "same", opts.dest is a1)
        if opts.t > opts.e or opts.t <= opts.f or opts.dest is not a1:
            for i in range(n):
                await host.set_index(opts.dest, opts.t + i, await host.get_index(a1, opts.f + i))
        else:
            # Destination overlaps the tail of the source: copy from the end.
            for i in range(n - 1, -1, -1):
                await host.set_index(opts.dest, opts.t + i, await host.get_index(a1, opts.f + i))
        return opts.dest

    # --- Bulk transfer ---

    @table_api_method
    async def concat(self, lst, sep=None, i=None, j=None) -> str:
        """concat(list, [sep, [i, [j]]]): joins list[i..j] with sep."""
        host = self.host
        size = await self.border(lst, Capability.READ, 1, "concat")
        opts = ConcatOptions(
            sep=host.opt_string(sep, "", 2, "concat"),
            i=host.opt_integer(i, 1, 3, "concat"),
            j=host.opt_integer(j, size, 4, "concat"),
        )
        if opts.i > opts.j:
            return ""
        parts = []
        for k in range(opts.i, opts.j + 1):
            value = await host.get_index(lst, k)
            text = self.printer.tostring(value)
            if text is None:
                raise CollectionTypeError(
                    f"invalid value ({type_name(value)}) at index {k} in table for 'concat'")
            parts.append(text)
        return opts.sep.join(parts)

    @table_api_method
    def pack(self, *args) -> Table:
        """pack(...): a new table with the arguments at 1..n and field n."""
        t = Table()
        for i in range(len(args), 0, -1):
            t.raw_set(i, args[i - 1])
        t.raw_set("n", len(args))
        return t

    @table_api_method
    async def unpack(self, lst, i=None, j=None) -> tuple:
        """unpack(list, [i, [j]]): returns list[i], ..., list[j] as a tuple."""
        host = self.host
        opts = UnpackOptions(i=host.opt_integer(i, 1, 2, "unpack"))
        if j is None:
            opts.j = await self.border(lst, Capability.READ, 1, "unpack")
        else:
            self.check_capabilities(lst, Capability.READ, 1, "unpack")
            opts.j = host.check_integer(j, 3, "unpack")
        n = opts.count
        if n <= 0 or n > MAX_RESULTS or not host.check_stack(n):
            raise CollectionRuntimeError("too many results to unpack")
        return tuple([await host.get_index(lst, k) for k in range(opts.i, opts.j + 1)])

    # --- Ordering ---

    @table_api_method
    async def sort(self, lst, comp=None):
        """sort(list, [comp]): sorts list[1..#list] in place; not stable."""
        host = self.host
        n = await self.border(lst, Capability.READ_WRITE, 1, "sort")
        if n > MAX_SORT_SIZE:
            host.arg_error(1, "sort", "array too big")
        if comp is not None and not callable(comp):
            host.type_error(2, "sort", "function", comp)
        sorter = TableSorter(host, lst, n, comp)
        await sorter.sort()
        host._dbg("sort", "n", n, "comparisons", sorter.comparisons)


def open_table_lib(host: Optional[Host] = None) -> Table:
    """Builds the collection namespace: a table of the exported operations."""
    lib = TableLib(host)
    namespace = Table()
    for name, member in inspect.getmembers(lib):
        if callable(member) and getattr(member, "_is_table_api", False):
            namespace.raw_set(name, member)
    return namespace


__all__ = [
    "TableLib",
    "ConcatOptions",
    "UnpackOptions",
    "MoveOptions",
    "open_table_lib",
    "table_api_method",
    "MAX_INTEGER",
    "MAX_RESULTS",
    "MAX_SORT_SIZE",
]
