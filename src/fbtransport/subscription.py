"""Cancellable handle for a live store subscription."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from fbtransport._store import Registration
from fbtransport.models import ChildEvent

_logger = logging.getLogger(__name__)


class Subscription:
    """A listener installed at one channel path.

    Notifications that arrive after :meth:`cancel` are dropped. Closing a
    store registration can block (the Admin SDK joins its listener thread),
    so it always happens in a worker thread.
    """

    def __init__(
        self,
        channel: str,
        event: ChildEvent,
        *,
        on_cancel: Callable[[Subscription], None] | None = None,
    ) -> None:
        self.channel = channel
        self.event = event
        self._registration: Registration | None = None
        self._on_cancel = on_cancel
        self._active = True

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"<Subscription {self.event} at {self.channel or '/'} {state}>"

    @property
    def is_active(self) -> bool:
        return self._active

    async def attach(self, registration: Registration) -> None:
        """Bind the store registration once the listener is installed."""
        if not self._active:
            await asyncio.to_thread(registration.close)
            return
        self._registration = registration

    async def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        registration = self._registration
        self._registration = None
        if self._on_cancel is not None:
            self._on_cancel(self)
        if registration is not None:
            _logger.debug("Closing %s listener at %s", self.event, self.channel or "/")
            await asyncio.to_thread(registration.close)
