import pytest

from tabula.tabula_datatypes import Table, ProtocolObject
from tabula.tabula_host import Host
from tabula.tabula_runtime import TableLib
from tabula.tabula_serialize import deserialize


@pytest.fixture
def host():
    """Returns a new Host for each test."""
    return Host()


@pytest.fixture
def lib(host):
    """A TableLib bound to the test host."""
    return TableLib(host)


def _store_border(store: dict) -> int:
    n = 0
    while (n + 1) in store:
        n += 1
    return n


def make_proxy(values=(), *, read=True, write=True, length=True):
    """A ProtocolObject whose elements live in a plain dict reached only via hooks."""
    store = {i: v for i, v in enumerate(values, start=1)}
    meta = Table()
    if read:
        meta["__index"] = lambda obj, key: obj.payload.get(key)

    def _newindex(obj, key, value):
        if value is None:
            obj.payload.pop(key, None)
        else:
            obj.payload[key] = value

    if write:
        meta["__newindex"] = _newindex
    if length:
        meta["__len"] = lambda obj: _store_border(obj.payload)
    return ProtocolObject(store, meta)


def proxy_list(proxy: ProtocolObject) -> list:
    store = proxy.payload
    return [store[i] for i in range(1, _store_border(store) + 1)]


@pytest.fixture
def load():
    """Parses JSON or YAML fixture text into tables."""
    return deserialize


@pytest.fixture
def proxy_factory():
    return make_proxy


@pytest.fixture
def proxy_values():
    return proxy_list
