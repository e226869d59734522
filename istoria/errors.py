"""
Exceptions raised by Istoria.
"""


class IstoriaError(Exception):
    """Base exception for Istoria."""
    pass


class ImportFormatError(IstoriaError):
    """Raised when an import source is malformed or missing required data."""
    pass


class StorageError(IstoriaError):
    """Raised when the memory store rejects an operation."""
    pass
