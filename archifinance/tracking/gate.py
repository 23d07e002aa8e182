"""
Mutation Gate (unexported-changes flag)

A single process-wide boolean telling the export/sync layer whether the
in-memory dataset has diverged from the last successful export or sync.

DESIGN DECISION: The gate is fed by the calling layer, never by the
calculators. Computations stay pure; every write entry point in the
workspace reports a ChangeEvent here, and the event type alone decides
whether the dataset becomes dirty or clean.

The flag is advisory. It has no effect on any computation.
"""

from typing import Callable, Optional

from archifinance.models.events import ChangeEvent
from archifinance.tracking.logger import get_logger


Listener = Callable[[bool], None]


class MutationGate:
    """
    Observable dirty flag.
    
    Listeners are called with the new value only when it actually changes.
    """
    
    def __init__(self, needs_export: bool = False):
        self._needs_export = needs_export
        self._listeners: list[Listener] = []
        self._last_event: Optional[ChangeEvent] = None
        self._logger = get_logger(__name__)
    
    @property
    def needs_export(self) -> bool:
        return self._needs_export
    
    @property
    def last_event(self) -> Optional[ChangeEvent]:
        return self._last_event
    
    def record(self, event: ChangeEvent) -> bool:
        """
        Apply an event: sync points clear the flag, everything else sets it.
        
        Returns the flag value after the event.
        """
        self._log(event)
        self._set(not event.marks_clean)
        return self._needs_export
    
    def mark_dirty(self, event: ChangeEvent) -> None:
        self._log(event)
        self._set(True)
    
    def mark_clean(self, event: ChangeEvent) -> None:
        self._log(event)
        self._set(False)
    
    def reset(self) -> None:
        """Back to the load-time state (clean, no history)."""
        self._last_event = None
        self._set(False)
    
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def _log(self, event: ChangeEvent) -> None:
        self._last_event = event
        self._logger.info("dataset_change", **event.to_log_dict())
    
    def _set(self, value: bool) -> None:
        if value == self._needs_export:
            return
        self._needs_export = value
        self._logger.debug("needs_export_changed", needs_export=value)
        for listener in list(self._listeners):
            listener(value)


_gate: Optional[MutationGate] = None


def get_gate() -> MutationGate:
    """The process-wide gate shared by every workspace in this process."""
    global _gate
    if _gate is None:
        _gate = MutationGate()
    return _gate
