"""Tests for the event channel."""

import pytest

from reflib.errors import InvalidArguments
from reflib.events import EventChannel


class Channel(EventChannel):
    EVENTS = ("data", "done")


@pytest.mark.unit
def test_on_receives_every_emit() -> None:
    """Test persistent subscriptions see each emission in order."""
    channel = Channel()
    seen: list = []
    channel.on("data", seen.append)

    channel.emit("data", 1)
    channel.emit("data", 2)

    assert seen == [1, 2]


@pytest.mark.unit
def test_once_fires_a_single_time() -> None:
    """Test once subscriptions are removed after the first emission."""
    channel = Channel()
    seen: list = []
    channel.once("data", seen.append)

    channel.emit("data", 1)
    channel.emit("data", 2)

    assert seen == [1]
    assert not channel.has_subscribers("data")


@pytest.mark.unit
def test_off_and_unsubscribe_handle() -> None:
    """Test both off() and the returned handle remove a subscription."""
    channel = Channel()
    first: list = []
    second: list = []
    channel.on("data", first.append)
    unsubscribe = channel.on("data", second.append)

    channel.off("data", first.append)
    unsubscribe()
    channel.emit("data", 1)

    assert first == []
    assert second == []


@pytest.mark.unit
def test_handlers_run_in_subscription_order() -> None:
    """Test handlers are invoked in the order they subscribed."""
    channel = Channel()
    calls: list[str] = []
    channel.on("done", lambda: calls.append("a"))
    channel.once("done", lambda: calls.append("b"))
    channel.on("done", lambda: calls.append("c"))

    channel.emit("done")

    assert calls == ["a", "b", "c"]


@pytest.mark.unit
@pytest.mark.parametrize("method", ["on", "once", "off"])
def test_unknown_event_is_rejected(method: str) -> None:
    """Test subscribing to an event outside the vocabulary fails."""
    channel = Channel()

    with pytest.raises(InvalidArguments, match="Unknown event"):
        getattr(channel, method)("finish", print)


@pytest.mark.unit
def test_emit_unknown_event_is_rejected() -> None:
    """Test emitting an undeclared event fails."""
    with pytest.raises(InvalidArguments):
        Channel().emit("other")
