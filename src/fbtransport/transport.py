"""Transport facade over a hierarchical realtime database."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fbtransport._codec import decode, pack_in, pack_out
from fbtransport._firebase import FirebaseStore
from fbtransport._paths import channel_parts, join_path, notification_parts
from fbtransport._redact import redact_for_log
from fbtransport._store import Store
from fbtransport.config import TransportConfig, resolve_config
from fbtransport.events import records_for_change
from fbtransport.exceptions import InvalidArgumentError, TransportError
from fbtransport.models import ChildEvent, ChildSnapshot, Record, Scope
from fbtransport.subscription import Subscription

_logger = logging.getLogger(__name__)

RecordCallback = Callable[[str, str, Any], None]


def _require(name: str, value: str | None) -> str:
    if not value:
        raise InvalidArgumentError(f"{name} is required")
    return value


def _split_callback_args(args: tuple[Any, ...], max_args: int, verb: str) -> tuple[tuple[Any, ...], Callable[..., None]]:
    """Separate leading positional arguments from the trailing callback."""
    if not 1 <= len(args) <= max_args:
        raise TypeError(f"{verb}() takes 1 to {max_args} positional arguments ({len(args)} given)")
    *head, callback = args
    if not callable(callback):
        raise TypeError(f"{verb}() last argument must be a callback")
    return tuple(head), callback


def _updated_scope(head: tuple[Any, ...]) -> Scope:
    if not head:
        return Scope()
    if len(head) == 1 and isinstance(head[0], Scope):
        return head[0]
    if len(head) == 1:
        return Scope(id=head[0] or None)
    return Scope(id=head[0] or None, band=head[1] or None)


class PathTransport:
    """Async ``list/get/update/updated/remove`` transport.

    Records are addressed as ``(id, band)`` and live at
    ``<prefix>/<id>/<band>``, with ``id`` and ``band`` key-encoded.

    Usage::

        async with PathTransport(host="https://my-db.firebaseio.com", prefix="things") as transport:
            await transport.update("MyThing", "istate", {"on": True})
            record = await transport.get("MyThing", "istate")

    Callbacks run on the event loop the transport was connected from, in the
    order the database delivers notifications for each subscription.
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        *,
        store: Store | None = None,
        **options: Any,
    ) -> None:
        self._config = resolve_config(config, options)
        self._prefix_parts = self._config.prefix_parts
        self._external_store = store is not None
        self._store = store
        self._loop: asyncio.AbstractEventLoop | None = None
        self._subscriptions: dict[str, list[Subscription]] = {}
        _logger.debug("Configured transport %s", redact_for_log({"host": self._config.host, "prefix": self._config.prefix, "credentials": self._config.credentials}))

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def prefix_parts(self) -> list[str]:
        return list(self._prefix_parts)

    @property
    def subscriptions(self) -> dict[str, list[Subscription]]:
        """Live subscriptions keyed by the channel they were installed at."""
        return {channel: list(subs) for channel, subs in self._subscriptions.items()}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PathTransport:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the database connection shared by every operation."""
        self._loop = asyncio.get_running_loop()
        if self._store is None:
            assert self._config.host is not None  # noqa: S101
            self._store = await asyncio.to_thread(
                FirebaseStore.connect,
                self._config.host,
                credentials_path=self._config.credentials,
                app_name=self._config.app_name,
            )

    async def close(self) -> None:
        """Cancel every subscription and release an owned connection."""
        subscriptions = [sub for subs in self._subscriptions.values() for sub in subs]
        for subscription in subscriptions:
            await subscription.cancel()
        if not self._external_store and self._store is not None:
            await asyncio.to_thread(self._store.close)
            self._store = None
        self._loop = None

    def _require_store(self) -> tuple[Store, asyncio.AbstractEventLoop]:
        if self._store is None or self._loop is None:
            raise TransportError("Transport not connected. Use 'async with PathTransport(...) as transport:'")
        return self._store, self._loop

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list(self, *args: Any) -> Subscription:
        """Report every thing under the prefix, then each new one.

        Called as ``list(callback)`` or ``list(query, callback)``; the query
        is accepted for interface compatibility and not used. ``callback``
        receives ``[id]`` once per thing, existing things in key order.
        """
        _query, callback = _split_callback_args(args, 2, "list")

        def on_child(snapshot: ChildSnapshot) -> None:
            callback([decode(snapshot.key)])

        return await self._subscribe(self._channel(), ChildEvent.CHILD_ADDED, on_child)

    async def get(self, id: str, band: str, callback: RecordCallback | None = None) -> Record:
        """Read one record; a missing record reads as an empty mapping."""
        _require("id", id)
        _require("band", band)
        store, _ = self._require_store()

        channel = self._channel(id, band)
        raw = await asyncio.to_thread(store.child(channel).get)
        record = Record(id=id, band=band, value=pack_in(raw))
        _logger.debug("get %s -> %s", channel, redact_for_log(record.value))

        if callback is not None:
            callback(*record.as_args())
        return record

    async def update(self, id: str, band: str, value: dict[str, Any] | None) -> None:
        """Replace the stored record with the non-empty entries of *value*."""
        _require("id", id)
        _require("band", band)
        store, _ = self._require_store()

        channel = self._channel(id, band)
        packed = pack_out(value)
        _logger.debug("set %s <- %s", channel, redact_for_log(packed))
        await asyncio.to_thread(store.child(channel).set, packed)

    async def updated(self, *args: Any) -> Subscription:
        """Watch records for changes.

        Accepted forms::

            updated(callback)                 # every thing, every band
            updated(id, callback)             # every band of one thing
            updated(id, band, callback)       # one band of one thing
            updated(Scope(id=..., band=...), callback)

        ``callback(id, band, value)`` receives ``value=None`` when the change
        happened below the band itself.
        """
        head, callback = _split_callback_args(args, 3, "updated")
        scope = _updated_scope(head)
        prefix_parts = self._prefix_parts

        def on_child(snapshot: ChildSnapshot) -> None:
            parts = notification_parts(snapshot.path)
            for record in records_for_change(prefix_parts, parts, snapshot.value):
                callback(*record.as_args())

        return await self._subscribe(self._channel(scope.id, scope.band), ChildEvent.CHILD_CHANGED, on_child)

    async def remove(self, id: str, band: str | None = None) -> None:
        """Delete one band, or the whole thing when *band* is omitted."""
        _require("id", id)
        store, _ = self._require_store()

        channel = self._channel(id, band)
        _logger.debug("delete %s", channel)
        await asyncio.to_thread(store.child(channel).delete)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _channel(self, id: str | None = None, band: str | None = None) -> str:
        return join_path(channel_parts(self._prefix_parts, id, band))

    async def _subscribe(
        self,
        channel: str,
        event: ChildEvent,
        handler: Callable[[ChildSnapshot], None],
    ) -> Subscription:
        store, loop = self._require_store()
        subscription = Subscription(channel, event, on_cancel=self._forget)

        def listener(snapshot: ChildSnapshot) -> None:
            # Runs on the store's notification thread.
            if subscription.is_active:
                loop.call_soon_threadsafe(self._deliver, subscription, handler, snapshot)

        self._subscriptions.setdefault(channel, []).append(subscription)
        try:
            registration = await asyncio.to_thread(store.child(channel).on, event, listener)
        except BaseException:
            self._forget(subscription)
            raise
        await subscription.attach(registration)
        return subscription

    def _forget(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.channel)
        if subs is None:
            return
        if subscription in subs:
            subs.remove(subscription)
        if not subs:
            del self._subscriptions[subscription.channel]

    @staticmethod
    def _deliver(
        subscription: Subscription,
        handler: Callable[[ChildSnapshot], None],
        snapshot: ChildSnapshot,
    ) -> None:
        if not subscription.is_active:
            return
        try:
            handler(snapshot)
        except Exception:
            _logger.exception("Callback for %r failed on %s", subscription, snapshot.path)
