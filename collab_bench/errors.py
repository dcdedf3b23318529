# =============================================================================
# collab-bench -- Error Types
# =============================================================================


class BenchError(Exception):
    """Base exception for all collab-bench errors."""


class BenchConfigError(BenchError):
    """Invalid benchmark configuration (negative counts, bad scheme, ...)."""


class BenchConnectionError(BenchError):
    """The WebSocket connection could not be established."""


class BenchWriteError(BenchError):
    """A login or change frame could not be written."""

    def __init__(self, event: str, cause: object) -> None:
        self.event = event
        self.cause = cause
        super().__init__(str(cause))


class BenchCloseError(BenchError):
    """The normal-closure frame could not be written."""


class BenchProtocolError(BenchError):
    """Inbound frame or payload is not a valid event."""
