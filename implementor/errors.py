class ImplerError(Exception):
    """Base class for every recoverable generation failure."""


class InvalidTargetError(ImplerError):
    """The requested type cannot be implemented (final, private, primitive, ...)."""


class ResolutionError(ImplerError):
    """The metadata provider could not resolve a type identifier."""


class RenderError(ImplerError):
    """A signature or the compilation unit text could not be produced."""


class DestinationError(ImplerError):
    """The generated unit could not be written to its destination."""


class CompilationError(ImplerError):
    """javac is missing or rejected the generated unit."""

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics = diagnostics


class PackagingError(ImplerError):
    """The compiled class could not be archived into a jar."""
