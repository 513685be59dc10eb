from __future__ import annotations


class TailorBookError(Exception):
    """Base class for errors raised by the service layer."""


class ValidationError(TailorBookError, ValueError):
    """Input was rejected before anything was persisted."""


class RecordNotFoundError(TailorBookError, LookupError):
    pass


class PersistenceError(TailorBookError):
    """The database refused a write; previously stored data is unchanged."""


class ExportError(TailorBookError):
    pass


class AuthorizationError(TailorBookError):
    pass
