"""Exception taxonomy for the application authoring core.

  ServiceError      - a call to the marketplace data service failed
    LookupFailure     - read side (type list, type schema, record, developer search)
    SubmissionFailure - write side (create app, update app version)
  SchemaDepthError  - a field tree nests deeper than the configured bound

LookupFailure is recovered locally by the session (logged, empty state),
except for the record fetch in an edit session, which ends the session.
SubmissionFailure releases the submit guard and resets the owner mode.
"""

from __future__ import annotations


class AuthoringError(Exception):
    """Base class for all errors raised by app_authoring."""


class ServiceError(AuthoringError):
    """A marketplace service operation failed.

    operation:    name of the collaborator call (e.g. "get_app_type").
    status_code:  HTTP status when the failure came from a response, else None.
    """

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.status_code = status_code


class LookupFailure(ServiceError):
    """A read-side service call failed."""


class SubmissionFailure(ServiceError):
    """A create or update call was rejected or returned a falsy result."""


class SchemaDepthError(AuthoringError):
    """Raised when a field tree is nested deeper than max_depth."""

    def __init__(self, max_depth: int) -> None:
        super().__init__(f"field tree exceeds maximum depth of {max_depth}")
        self.max_depth = max_depth
