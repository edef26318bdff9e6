"""Structural interface of the hierarchical database.

The transport only relies on these protocols, which keeps the
firebase-admin binding concrete while tests can pass an in-memory double.
Every method may block; the transport calls them from a worker thread.
Listeners may be invoked from any thread.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from fbtransport.models import ChildEvent, ChildSnapshot

ChildListener = Callable[[ChildSnapshot], None]


class Registration(Protocol):
    def close(self) -> None:
        ...


class NodeRef(Protocol):
    @property
    def path(self) -> str:
        ...

    def get(self) -> Any:
        ...

    def set(self, value: Any) -> None:
        ...

    def delete(self) -> None:
        ...

    def on(self, event: ChildEvent, listener: ChildListener) -> Registration:
        ...


class Store(Protocol):
    def child(self, path: str) -> NodeRef:
        ...

    def close(self) -> None:
        ...
