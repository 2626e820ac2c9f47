"""Error taxonomy raised by the calculation engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One validation failure anchored to a dotted configuration path."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


class TCOError(Exception):
    """Base class for calculator errors."""


class ValidationError(TCOError):
    """Input violates structure or documented ranges; nothing was computed."""

    def __init__(self, field_errors: list[FieldError]) -> None:
        self.field_errors = field_errors
        super().__init__(f"Invalid configuration: {'; '.join(str(e) for e in field_errors)}")

    @property
    def errors(self) -> list[str]:
        return [str(error) for error in self.field_errors]


class ConfigurationError(TCOError):
    """Input is well formed but cannot be satisfied by the equipment catalog."""

    def __init__(self, message: str, hint: str) -> None:
        self.message = message
        self.hint = hint
        super().__init__(f"{message} ({hint})")
