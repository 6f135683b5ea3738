"""Signal dispatch for package lifecycle notifications.

Slots are plain callables registered under a signal name. Dispatch never
propagates a slot's failure back to the emitter: the failure is logged and
the remaining slots still run.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

PACKAGE_STATES_UPDATED = "package_states_updated"

Slot = Callable[..., Any]


class SignalDispatcher:
    """Registry of named slots per signal."""

    def __init__(self) -> None:
        self._slots: Dict[str, Dict[str, Slot]] = {}

    def connect(self, signal: str, slot: Slot, *, name: Optional[str] = None) -> str:
        """Register ``slot`` for ``signal`` and return the name it is stored under.

        Connecting again with the same name replaces the previous slot.
        """
        slot_name = name or getattr(slot, "__qualname__", None) or repr(slot)
        self._slots.setdefault(signal, {})[slot_name] = slot
        return slot_name

    def disconnect(self, signal: str, name: str) -> bool:
        slots = self._slots.get(signal) or {}
        return slots.pop(name, None) is not None

    def slots(self, signal: str) -> List[str]:
        return list((self._slots.get(signal) or {}).keys())

    def dispatch(self, signal: str, *args: Any, **kwargs: Any) -> int:
        """Invoke every slot connected to ``signal``.

        Returns:
            Number of slots that completed without raising.
        """
        delivered = 0
        for slot_name, slot in list((self._slots.get(signal) or {}).items()):
            try:
                slot(*args, **kwargs)
            except Exception:
                logger.exception("Slot %s for signal %s failed", slot_name, signal)
                continue
            delivered += 1
        return delivered


__all__ = ["SignalDispatcher", "PACKAGE_STATES_UPDATED"]
