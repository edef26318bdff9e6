from __future__ import annotations

import asyncio
import threading
from unittest import mock

import pytest

from fbtransport import PathTransport, Subscription
from fbtransport.models import ChildEvent


class _BlockingRegistration:
    """Registration whose close() blocks like the Admin SDK's thread join."""

    def __init__(self) -> None:
        self.closing = threading.Event()
        self.release = threading.Event()
        self.closed = False

    def close(self) -> None:
        self.closing.set()
        self.release.wait(timeout=5)
        self.closed = True


@pytest.mark.asyncio
async def test_cancel_keeps_event_loop_responsive() -> None:
    registration = _BlockingRegistration()
    subscription = Subscription("root", ChildEvent.CHILD_CHANGED)
    await subscription.attach(registration)

    task = asyncio.create_task(subscription.cancel())
    assert await asyncio.to_thread(registration.closing.wait, 5)

    # close() is still blocked in its worker; the loop keeps running us.
    assert not task.done()
    assert not subscription.is_active

    registration.release.set()
    await task
    assert registration.closed


@pytest.mark.asyncio
async def test_cancel_forgets_subscription_on_loop_thread() -> None:
    loop_thread = threading.get_ident()
    seen_threads: list[int] = []
    subscription = Subscription(
        "root",
        ChildEvent.CHILD_CHANGED,
        on_cancel=lambda _sub: seen_threads.append(threading.get_ident()),
    )
    await subscription.attach(mock.Mock())

    await subscription.cancel()
    await subscription.cancel()
    assert seen_threads == [loop_thread]


@pytest.mark.asyncio
async def test_attach_after_cancel_closes_registration() -> None:
    subscription = Subscription("root", ChildEvent.CHILD_ADDED)
    await subscription.cancel()
    registration = mock.Mock()
    await subscription.attach(registration)
    registration.close.assert_called_once_with()


@pytest.mark.asyncio
async def test_transport_close_cancels_through_worker(store) -> None:
    transport = PathTransport(host="https://test-db.firebaseio.com", prefix="/root", store=store)
    await transport.connect()
    subscription = await transport.updated(lambda *a: None)
    registration = _BlockingRegistration()
    registration.release.set()
    subscription._registration = registration  # noqa: SLF001

    await transport.close()
    assert registration.closed
    assert transport.subscriptions == {}
