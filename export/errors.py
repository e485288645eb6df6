"""Exceptions raised by the export engine."""


class ExportError(Exception):
    """Base class for export failures."""


class ConfigurationError(ExportError):
    """Headers, bindings or type descriptor do not describe a buildable sheet."""

    def __init__(self, message: str, issues=None):
        super().__init__(message)
        self.issues = list(issues or [])


class ChannelError(ExportError):
    """The finished document could not be written to the output channel."""


class AccessFault(ExportError):
    """A field or key could not be read from a record."""


class CoercionFault(ExportError):
    """A value could not be converted to its column's declared type."""
