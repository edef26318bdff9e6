from __future__ import annotations

import asyncio
import copy
import threading
from collections.abc import Callable
from typing import Any

import pytest
import pytest_asyncio

from fbtransport import PathTransport
from fbtransport.models import ChildEvent, ChildSnapshot


def _split(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def _put(node: Any, parts: list[str], value: Any) -> Any:
    if not parts:
        return None if value is None or value == {} else copy.deepcopy(value)
    children = dict(node) if isinstance(node, dict) else {}
    updated = _put(children.get(parts[0]), parts[1:], value)
    if updated is None:
        children.pop(parts[0], None)
    else:
        children[parts[0]] = updated
    return children or None


def _lookup(node: Any, parts: list[str]) -> Any:
    for part in parts:
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


class _MemoryRegistration:
    def __init__(self, store: MemoryStore, entry: tuple[list[str], ChildEvent, Callable[[ChildSnapshot], None]]) -> None:
        self._store = store
        self._entry = entry
        self.closed = False

    def close(self) -> None:
        self.closed = True
        with self._store.lock:
            if self._entry in self._store.listeners:
                self._store.listeners.remove(self._entry)


class MemoryNode:
    def __init__(self, store: MemoryStore, parts: list[str]) -> None:
        self._store = store
        self._parts = parts

    @property
    def path(self) -> str:
        return "/" + "/".join(self._parts)

    def get(self) -> Any:
        self._store.calls.append(("get", self.path))
        return copy.deepcopy(_lookup(self._store.data, self._parts))

    def set(self, value: Any) -> None:
        self._store.calls.append(("set", self.path))
        self._store.write(self._parts, value)

    def delete(self) -> None:
        self._store.calls.append(("delete", self.path))
        self._store.write(self._parts, None)

    def on(self, event: ChildEvent, listener: Callable[[ChildSnapshot], None]) -> _MemoryRegistration:
        self._store.calls.append(("on", self.path))
        entry = (self._parts, event, listener)
        with self._store.lock:
            self._store.listeners.append(entry)
        if event is ChildEvent.CHILD_ADDED:
            children = _lookup(self._store.data, self._parts)
            if isinstance(children, dict):
                for key in sorted(children):
                    listener(self._store.snapshot(self._parts + [key], children[key]))
        return _MemoryRegistration(self._store, entry)


class MemoryStore:
    """In-memory hierarchical store that records every call it receives.

    Writes notify listeners with database child semantics: a listener sees
    the immediate child under its own path that was added or changed.
    """

    def __init__(self) -> None:
        self.data: Any = None
        self.calls: list[tuple[str, str]] = []
        self.listeners: list[tuple[list[str], ChildEvent, Callable[[ChildSnapshot], None]]] = []
        self.lock = threading.Lock()
        self.closed = False

    def child(self, path: str) -> MemoryNode:
        self.calls.append(("child", path))
        return MemoryNode(self, _split(path))

    def close(self) -> None:
        self.closed = True

    @staticmethod
    def snapshot(parts: list[str], value: Any) -> ChildSnapshot:
        return ChildSnapshot(key=parts[-1], path="/" + "/".join(parts), value=copy.deepcopy(value))

    def write(self, parts: list[str], value: Any) -> None:
        before = self.data
        self.data = _put(self.data, parts, value)
        with self.lock:
            listeners = list(self.listeners)
        for listen_parts, event, listener in listeners:
            old = _lookup(before, listen_parts)
            new = _lookup(self.data, listen_parts)
            old = old if isinstance(old, dict) else {}
            new = new if isinstance(new, dict) else {}
            for key in sorted(new):
                if key not in old:
                    kind = ChildEvent.CHILD_ADDED
                elif old[key] != new[key]:
                    kind = ChildEvent.CHILD_CHANGED
                else:
                    continue
                if kind is event:
                    listener(self.snapshot(listen_parts + [key], new[key]))

    def emit_changed(self, path: str, value: Any) -> None:
        """Deliver a raw child_changed notification to every change listener."""
        with self.lock:
            listeners = [entry for entry in self.listeners if entry[1] is ChildEvent.CHILD_CHANGED]
        parts = _split(path)
        for _parts, _event, listener in listeners:
            listener(ChildSnapshot(key=parts[-1] if parts else "", path=path, value=value))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest_asyncio.fixture
async def transport(store: MemoryStore):
    transport = PathTransport(host="https://test-db.firebaseio.com", prefix="/root", store=store)
    await transport.connect()
    yield transport
    await transport.close()


@pytest.fixture
def drain() -> Callable[[], Any]:
    async def _drain() -> None:
        for _ in range(5):
            await asyncio.sleep(0)

    return _drain
