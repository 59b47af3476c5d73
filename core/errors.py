# core/errors.py
"""Failure types raised by the content managers.

Each error carries the HTTP status the request boundary should answer with.
Managers translate storage-layer exceptions into ``OperationFailedError`` so
that callers only ever see these types.
"""


class ContentError(Exception):
    """Base class for every failure surfaced by the core"""
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ContentError):
    http_status = 400


class AuthenticationError(ContentError):
    http_status = 401


class PermissionDeniedError(ContentError):
    http_status = 403


class NotFoundError(ContentError):
    http_status = 404


class ConflictError(ContentError):
    http_status = 409


class PayloadTooLargeError(ContentError):
    http_status = 413


class OperationFailedError(ContentError):
    http_status = 500


class StorageNotConfiguredError(ContentError):
    http_status = 500


class TransactionTimeoutError(OperationFailedError):
    pass
