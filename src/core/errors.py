"""Error taxonomy shared by the core pipeline and its adapters."""

from __future__ import annotations


class ReportWatchError(Exception):
    """Base class for every error raised by reportwatch."""


class AuthError(ReportWatchError):
    """Upstream rejected the credentials or the session expired."""


class TransientFetchError(ReportWatchError):
    """Network, server or parse failure unrelated to authentication."""


class PersistenceError(ReportWatchError):
    """The ledger could not be written to its backing store."""


class MalformedRecordError(ReportWatchError):
    """A single report has an unexpected shape and cannot be relayed."""

    def __init__(self, report_id: str, reason: str) -> None:
        super().__init__(f"Report {report_id}: {reason}")
        self.report_id = report_id
        self.reason = reason


class DeliveryError(ReportWatchError):
    """The notification sink refused or failed to accept a batch."""
