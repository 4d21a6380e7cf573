"""DelegationAuditLogger: JSONL audit trail of authorization decisions.

Every registration, revocation, authorized execution and denied request is
appended as a single JSON line to the configured log file. Without a file
path, events are kept in an in-memory buffer that can be drained via
:meth:`DelegationAuditLogger.drain_buffer`.
"""
from __future__ import annotations

import datetime
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AuditEvent:
    """A single auditable delegation event.

    Parameters
    ----------
    event_type:
        Short snake_case string identifying the event
        (e.g. "delegate_registered").
    subject:
        Address the event is about (usually the delegate key).
    actor:
        Principal on whose authority the event happened (owner or
        delegate). Defaults to "system".
    details:
        Arbitrary key-value metadata about the event.
    timestamp:
        UTC datetime of the event. Defaults to now.
    """

    event_type: str
    subject: str
    actor: str = "system"
    details: dict[str, object] = field(default_factory=dict)
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary suitable for JSON encoding."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "subject": self.subject,
            "actor": self.actor,
            "details": self.details,
        }


class DelegationAuditLogger:
    """Append-only JSONL audit logger for delegation events.

    Thread-safe. Each call to :meth:`log` appends one JSON line to the
    configured file path (or to the in-memory buffer if no path is set).

    Parameters
    ----------
    log_path:
        Path to the JSONL log file. Parent directories are created
        automatically. If None, events are buffered in memory only.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path
        self._buffer: list[str] = []
        self._lock = threading.Lock()

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: AuditEvent) -> None:
        """Append an audit event to the log."""
        line = json.dumps(event.to_dict(), separators=(",", ":"), default=str)
        with self._lock:
            if self._log_path is not None:
                with self._log_path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            else:
                self._buffer.append(line)

    def log_event(
        self,
        event_type: str,
        subject: str,
        actor: str = "system",
        **details: object,
    ) -> None:
        """Log a simple event without constructing an :class:`AuditEvent`."""
        self.log(
            AuditEvent(
                event_type=event_type,
                subject=subject,
                actor=actor,
                details=dict(details),
            )
        )

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------

    def log_registration(self, owner: str, delegate: str, expiry: int, nonce: int) -> None:
        self.log_event(
            "delegate_registered", subject=delegate, actor=owner, expiry=expiry, nonce=nonce
        )

    def log_revocation(self, owner: str, delegate: str, index: int) -> None:
        self.log_event("delegate_revoked", subject=delegate, actor=owner, index=index)

    def log_execution(
        self, delegate: str, account: str, to: str, value: int, success: bool
    ) -> None:
        self.log_event(
            "execution_authorized",
            subject=delegate,
            actor=delegate,
            account=account,
            to=to,
            value=value,
            success=success,
        )

    def log_denial(self, subject: str, reason: str, operation: str, **kwargs: object) -> None:
        """Log a request the engine refused, with the failure reason."""
        self.log_event(
            "authorization_denied",
            subject=subject,
            reason=reason,
            operation=operation,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def drain_buffer(self) -> list[str]:
        """Return and clear the in-memory event buffer, oldest first."""
        with self._lock:
            events = list(self._buffer)
            self._buffer.clear()
        return events

    def read_log(self, tail: int | None = None) -> list[dict[str, object]]:
        """Read parsed events from the log file (or the buffer).

        Parameters
        ----------
        tail:
            If provided, return only the last *tail* events.
        """
        if self._log_path is None or not self._log_path.exists():
            with self._lock:
                lines = list(self._buffer)
        else:
            with self._lock:
                lines = self._log_path.read_text(encoding="utf-8").splitlines()

        parsed: list[dict[str, object]] = []
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                parsed.append(json.loads(stripped))
            except json.JSONDecodeError:
                continue

        if tail is not None:
            return parsed[-tail:]
        return parsed
