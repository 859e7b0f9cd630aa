"""Domain-level exceptions shared by the store and the processor."""

from __future__ import annotations


class ProcessingCancelled(Exception):
    """Cooperative-cancellation signal observed by a per-item task.

    Raised by the processor when a run is cancelled, and may be raised by a
    store call to signal that the surrounding work should stop. Either way the
    affected task terminates with failure.
    """
