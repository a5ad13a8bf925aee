"""
Step Outcomes
=============

Every launcher step reports one of two severities:

  - FATAL:        the run cannot continue (missing docker, daemon down,
                  compose failure, readiness timeout, ONNX install failure)
  - RECOVERABLE:  logged as a warning, the run carries on (no xhost,
                  display forwarding failed, an init-*.sh script failed)

Call sites decide explicitly: `outcome.raise_if_fatal()` aborts, anything
else is logged and the sequence continues.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Optional


class Severity(enum.Enum):
    OK          = "ok"
    RECOVERABLE = "recoverable"
    FATAL       = "fatal"


class LauncherError(RuntimeError):
    """Fatal launcher failure. The CLI turns this into exit code 1."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step


@dataclass
class StepOutcome:
    name:     str
    severity: Severity
    message:  str = ""
    details:  list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.severity is Severity.OK

    @property
    def fatal(self) -> bool:
        return self.severity is Severity.FATAL

    @classmethod
    def success(cls, name: str, message: str = "", details: Optional[list[str]] = None) -> "StepOutcome":
        return cls(name, Severity.OK, message, list(details or []))

    @classmethod
    def recoverable(cls, name: str, message: str, details: Optional[list[str]] = None) -> "StepOutcome":
        return cls(name, Severity.RECOVERABLE, message, list(details or []))

    @classmethod
    def failure(cls, name: str, message: str, details: Optional[list[str]] = None) -> "StepOutcome":
        return cls(name, Severity.FATAL, message, list(details or []))

    def raise_if_fatal(self) -> "StepOutcome":
        if self.fatal:
            raise LauncherError(self.message, step=self.name)
        return self
