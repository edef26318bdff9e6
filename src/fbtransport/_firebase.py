"""firebase-admin backed store.

The Admin SDK exposes a raw ``listen()`` stream of ``put``/``patch`` events
relative to the watched node. :class:`_ChildEventRelay` mirrors the watched
node's value from that stream and turns it into per-child ``child_added`` and
``child_changed`` snapshots.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import Iterator
from typing import Any
from urllib.parse import quote, unquote

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin import exceptions as firebase_exceptions

from fbtransport._paths import split_path
from fbtransport._store import ChildListener
from fbtransport.exceptions import StoreError
from fbtransport.models import ChildEvent, ChildSnapshot

_logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _store_errors(operation: str, path: str) -> Iterator[None]:
    try:
        yield
    except firebase_exceptions.FirebaseError as exc:
        raise StoreError(
            f"{operation} failed at {path or '/'}: {exc}",
            path=path,
            operation=operation,
        ) from exc


def _put(node: Any, segments: list[str], value: Any) -> Any:
    """Return a copy of *node* with *value* stored at *segments*.

    ``None`` deletes, and mappings left empty disappear, as they do in the
    database. Untouched branches are shared, not copied.
    """
    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    children = dict(node) if isinstance(node, dict) else {}
    updated = _put(children.get(head), rest, value)
    if updated is None or updated == {}:
        children.pop(head, None)
    else:
        children[head] = updated
    return children or None


class _ChildEventRelay:
    """``listen()`` callback that emits child snapshots of one kind."""

    def __init__(self, node_path: str, event: ChildEvent, listener: ChildListener) -> None:
        self._node_path = node_path.rstrip("/")
        self._event = event
        self._listener = listener
        self._value: Any = None

    def _children(self) -> dict[str, Any]:
        return self._value if isinstance(self._value, dict) else {}

    def __call__(self, event: db.Event) -> None:
        try:
            self.apply(event.event_type, event.path, event.data)
        except Exception:
            _logger.warning("Listener at %s failed to handle %s event", self._node_path or "/", event.event_type, exc_info=True)

    def apply(self, event_type: str, path: str, data: Any) -> None:
        segments = split_path(path)
        before = self._children()

        if event_type == "put":
            self._value = _put(self._value, segments, data)
        elif event_type == "patch" and isinstance(data, dict):
            for key, value in data.items():
                self._value = _put(self._value, segments + split_path(key), value)
        else:
            _logger.debug("Unhandled stream event %s at %s", event_type, path)
            return

        after = self._children()
        for key in sorted(after):
            new = after[key]
            if key not in before:
                kind = ChildEvent.CHILD_ADDED
            elif before[key] is not new and before[key] != new:
                kind = ChildEvent.CHILD_CHANGED
            else:
                continue
            if kind is self._event:
                self._listener(ChildSnapshot(key=key, path=f"{self._node_path}/{key}", value=new))


class FirebaseNode:
    """One location in the Realtime Database."""

    def __init__(self, ref: db.Reference) -> None:
        self._ref = ref

    @property
    def path(self) -> str:
        return unquote(self._ref.path)

    def get(self) -> Any:
        with _store_errors("get", self.path):
            return self._ref.get()

    def set(self, value: Any) -> None:
        with _store_errors("set", self.path):
            self._ref.set(value)

    def delete(self) -> None:
        with _store_errors("delete", self.path):
            self._ref.delete()

    def on(self, event: ChildEvent, listener: ChildListener) -> db.ListenerRegistration:
        _logger.debug("Listening for %s at %s", event, self.path)
        with _store_errors("listen", self.path):
            return self._ref.listen(_ChildEventRelay(self.path, event, listener))


class FirebaseStore:
    """Connection to one Realtime Database through a dedicated firebase-admin app."""

    def __init__(self, app: firebase_admin.App) -> None:
        self._app = app
        self._closed = False

    @classmethod
    def connect(
        cls,
        host: str,
        *,
        credentials_path: str | None = None,
        app_name: str | None = None,
    ) -> FirebaseStore:
        name = app_name or f"fbtransport-{uuid.uuid4().hex}"
        try:
            cred = credentials.Certificate(credentials_path) if credentials_path else credentials.ApplicationDefault()
            app = firebase_admin.initialize_app(cred, {"databaseURL": host}, name=name)
        except (ValueError, OSError) as exc:
            raise StoreError(f"Could not connect to {host}: {exc}", operation="connect") from exc
        _logger.debug("Connected app=%s host=%s", name, host)
        return cls(app)

    @property
    def app(self) -> firebase_admin.App:
        return self._app

    def child(self, path: str) -> FirebaseNode:
        # The Admin SDK puts segments into the REST URL as given and the server
        # unquotes them once, so quote here to keep stored keys as encoded.
        quoted = "/".join(quote(segment, safe="") for segment in split_path(path))
        return FirebaseNode(db.reference("/" + quoted, app=self._app))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        firebase_admin.delete_app(self._app)
        _logger.debug("Closed app=%s", self._app.name)
