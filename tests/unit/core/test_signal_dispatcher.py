"""Tests for signal dispatch."""
from __future__ import annotations

import logging
from typing import List

from packstate.core.events import PACKAGE_STATES_UPDATED, SignalDispatcher


def test_slots_run_in_registration_order() -> None:
    dispatcher = SignalDispatcher()
    calls: List[str] = []
    dispatcher.connect("sig", lambda v: calls.append(f"first:{v}"), name="first")
    dispatcher.connect("sig", lambda v: calls.append(f"second:{v}"), name="second")

    assert dispatcher.dispatch("sig", 1) == 2
    assert calls == ["first:1", "second:1"]
    assert dispatcher.slots("sig") == ["first", "second"]


def test_dispatch_without_slots() -> None:
    assert SignalDispatcher().dispatch(PACKAGE_STATES_UPDATED, object()) == 0


def test_failing_slot_is_logged_and_skipped(caplog) -> None:
    dispatcher = SignalDispatcher()
    calls: List[int] = []

    def broken(value: int) -> None:
        raise ValueError("nope")

    dispatcher.connect("sig", broken, name="broken")
    dispatcher.connect("sig", calls.append, name="ok")

    with caplog.at_level(logging.ERROR, logger="packstate.core.events"):
        assert dispatcher.dispatch("sig", 5) == 1

    assert calls == [5]
    assert any("broken" in r.getMessage() and r.exc_info for r in caplog.records)


def test_reconnect_replaces_and_disconnect_removes() -> None:
    dispatcher = SignalDispatcher()
    calls: List[str] = []
    dispatcher.connect("sig", lambda: calls.append("old"), name="slot")
    dispatcher.connect("sig", lambda: calls.append("new"), name="slot")
    dispatcher.dispatch("sig")
    assert calls == ["new"]

    assert dispatcher.disconnect("sig", "slot") is True
    assert dispatcher.disconnect("sig", "slot") is False
    assert dispatcher.dispatch("sig") == 0


def test_default_slot_name_is_qualname() -> None:
    def handler() -> None:
        pass

    name = SignalDispatcher().connect("sig", handler)
    assert name.endswith("handler")
