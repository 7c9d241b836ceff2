from typing import Optional


class SyncError(Exception):
    """Base class for every failure a sync job can surface to its caller."""

    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(SyncError):
    status_code = 401

    def __init__(self):
        super().__init__("Unauthorized")


class PayloadInvalid(SyncError):
    status_code = 400


class UpstreamError(SyncError):
    def __init__(self, message: str, *, path: str):
        super().__init__(message)
        self.path = path


class UpstreamUnreachable(UpstreamError):
    """Network failure, timeout or transient HTTP status. Safe to retry."""


class UpstreamRejected(UpstreamError):
    """Non-transient HTTP status from the upstream (bad token, bad request)."""

    def __init__(self, message: str, *, path: str, status: int):
        super().__init__(message, path=path)
        self.status = status


class UpstreamMalformed(UpstreamError):
    """Body could not be decoded or had an unexpected top-level shape."""


class TransformSkipped(SyncError):
    """A row lacked its conflict key and was dropped before the write."""

    def __init__(self, domain: str, missing: list[str]):
        super().__init__(f"{domain}: row missing conflict key field(s) {', '.join(missing)}")
        self.domain = domain
        self.missing = missing


class StorageWriteFailed(SyncError):
    def __init__(self, message: str, *, domain: str, committed: int):
        super().__init__(message)
        self.domain = domain
        self.committed = committed
