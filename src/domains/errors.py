# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the engine domains.

Every failure is reported synchronously to the caller:

- EngineValidationError: input rejected, nothing was written.
- EngineNotFoundError: the referenced record does not exist.
- ConcurrencyConflictError: a concurrent writer won twice in a row; the
  caller may resubmit.

Domains subclass these so callers can catch either the specific error or
the whole category.
"""


class EngineError(Exception):
    """Base exception for engine errors."""

    pass


class EngineValidationError(EngineError):
    """Raised when input fails validation.

    Attributes:
        field: Name of the offending input field.
        message: Human-readable description.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class EngineNotFoundError(EngineError):
    """Raised when a referenced record does not exist.

    Attributes:
        resource: Kind of record ("exam entry", "exam batch", ...).
        identifier: The identifier that was looked up.
    """

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class ConcurrencyConflictError(EngineError):
    """Raised when an optimistic write keeps losing to concurrent writers."""

    pass
