"""Validation report — classified findings accumulated across passes."""

import enum
from collections.abc import Callable
from dataclasses import dataclass, field


class Severity(enum.Enum):
    INFO    = "info"      # section headers, counts; not stored
    SUCCESS = "success"
    WARNING = "warning"
    ERROR   = "error"


class ValidationStatus(enum.Enum):
    OK               = "ok"
    OK_WITH_WARNINGS = "ok_with_warnings"
    FAILED           = "failed"

    @property
    def exit_code(self) -> int:
        """Warnings never fail the run."""
        return 1 if self is ValidationStatus.FAILED else 0


FindingSink = Callable[[str, Severity], None]


@dataclass
class Report:
    """Ordered findings for one validation run.

    Created empty at the start of a run and appended to by every pass.
    Each finding is also forwarded to ``sink`` (if set) as it is recorded,
    so the terminal shows findings live.
    """

    successes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    sink: FindingSink | None = field(default=None, repr=False, compare=False)

    def _emit(self, message: str, severity: Severity) -> None:
        if self.sink is not None:
            self.sink(message, severity)

    def add_success(self, message: str) -> None:
        self.successes.append(message)
        self._emit(message, Severity.SUCCESS)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)
        self._emit(message, Severity.WARNING)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self._emit(message, Severity.ERROR)

    def info(self, message: str) -> None:
        self._emit(message, Severity.INFO)

    @property
    def status(self) -> ValidationStatus:
        if self.errors:
            return ValidationStatus.FAILED
        if self.warnings:
            return ValidationStatus.OK_WITH_WARNINGS
        return ValidationStatus.OK
