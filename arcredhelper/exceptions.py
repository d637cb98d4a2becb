#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Errors raised by the credential helper."""

from __future__ import annotations


class CredHelperError(Exception):
    """Base class for all credential helper failures."""


class ValidationError(CredHelperError, ValueError):
    """One or more invalid inputs, reported together before any I/O."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("\n".join(self.errors))

    @classmethod
    def collect(cls, *errors: ValidationError | str | None) -> ValidationError | None:
        """Join messages and other validation errors into one, or None if empty."""
        messages: list[str] = []
        for error in errors:
            if error is None:
                continue
            if isinstance(error, ValidationError):
                messages.extend(error.errors)
            else:
                messages.append(error)
        return cls(messages) if messages else None


class ConfigFileError(CredHelperError):
    """Reading, parsing or writing a config file failed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class CredentialError(CredHelperError):
    """No token or key could be obtained."""


class RefreshError(CredHelperError):
    """A background refresh tick failed and the loop stopped."""
