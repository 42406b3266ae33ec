"""Exceptions raised by the sync engines and their I/O layer.

The engines never exit the process; the CLI turns these into
user-facing errors.
"""


class SyncError(RuntimeError):
    """Base class for all failures that abort a run."""


class MissingInputError(SyncError):
    """A required input file does not exist."""


class MalformedInputError(SyncError):
    """An input document is not valid JSON/YAML or has the wrong shape."""


class SpecLoadError(SyncError):
    """An OpenAPI document could not be fetched."""


class ConversionError(SyncError):
    """The external OpenAPI to Postman converter failed."""
