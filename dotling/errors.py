"""Exception hierarchy used throughout dotling."""

from __future__ import annotations

import os
from pathlib import Path


class DotlingError(Exception):
    """Base class for every error dotling raises."""


class FileOperationError(DotlingError):
    """A filesystem operation failed on a specific path."""

    def __init__(self, path: str | os.PathLike[str], operation: str, cause: OSError) -> None:
        self.path = Path(path)
        self.operation = operation
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"{operation} `{self.path}`: {reason}")


class ConfigError(DotlingError):
    """The configuration file could not be parsed or validated."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        if line is None:
            text = f"config error: {message}"
        else:
            text = f"config error (line {line}): {message}"
        super().__init__(text)


class CryptoError(DotlingError):
    """A cryptographic operation failed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"crypto error: {message}")


class DeployError(DotlingError):
    """Deploying a tracked entry failed."""

    def __init__(self, entry: str, message: str) -> None:
        self.entry = entry
        self.message = message
        super().__init__(f"deploy `{entry}`: {message}")


class VaultError(DotlingError):
    """A vault operation failed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"vault error: {message}")


class TemplateError(DotlingError):
    """A template could not be rendered or validated."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"template error in `{source}`: {message}")


class UserError(DotlingError):
    """An error whose message is meant for the user as is."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)