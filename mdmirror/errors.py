from __future__ import annotations

USAGE_EXIT = 2
RUNTIME_EXIT = 1


class PublishError(Exception):
    exit_status = RUNTIME_EXIT


class PreconditionError(PublishError):
    """Raised before anything is written to the output root."""

    exit_status = USAGE_EXIT


class ReplicationError(PublishError):
    exit_status = RUNTIME_EXIT


class ConversionError(ReplicationError):
    def __init__(self, source, returncode: int, details: str = ""):
        self.source = source
        self.returncode = returncode
        self.details = details
        message = f"pandoc failed on {source} (exit {returncode})"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
