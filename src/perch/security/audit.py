"""Security audit events.

Small opt-in event channel for authentication telemetry. Applications
can register a sink to forward events to logs, metrics, or a SIEM.

Events emitted by perch:

* ``auth.login.success`` / ``auth.login.failure``
* ``auth.logout.success``
* ``auth.principal.stale`` (session pointed at a user that no longer exists)
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    user_id: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    user_id: int | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort security event to the configured sink."""
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    sink(
        SecurityEvent(
            name=name,
            path=getattr(request, "path", None),
            method=getattr(request, "method", None),
            user_id=user_id,
            details=details or {},
        )
    )
