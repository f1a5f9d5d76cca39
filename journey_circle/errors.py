"""Exception types raised by the journey circle engine."""


class DiagramError(Exception):
    """Base class for engine errors."""


class FetchError(DiagramError):
    """The graph source rejected or failed at the network level."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class SurfaceUnavailable(DiagramError):
    """The host did not provide a usable drawing surface."""


class ExportError(DiagramError):
    """The current frame could not be encoded as an image."""
