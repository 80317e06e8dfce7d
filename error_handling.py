"""
Error handling for the Clarice pipeline
Diagnostics for the recovering stages, exceptions for the failing ones
"""

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO


# ============================================================================
# DATA STRUCTURES (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A reported problem; not necessarily fatal"""
    stage: str
    message: str
    context: Optional[str] = None

    def __str__(self) -> str:
        return format_diagnostic(self)


def make_diagnostic(stage: str, message: str, context: Optional[str] = None) -> Diagnostic:
    """Create a diagnostic for one pipeline stage"""
    return Diagnostic(stage=stage, message=message, context=context)


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Format a diagnostic as a single line"""
    text = f"{diagnostic.stage.capitalize()} error: {diagnostic.message}"
    if diagnostic.context:
        text += f" (in {diagnostic.context})"
    return text


def format_diagnostics(diagnostics: List[Diagnostic]) -> str:
    """Format several diagnostics, one per line"""
    return "\n".join(format_diagnostic(d) for d in diagnostics)


def report_diagnostic(diagnostic: Diagnostic, stream: Optional[TextIO] = None) -> None:
    """Echo a diagnostic to standard error as soon as it is recorded"""
    print(format_diagnostic(diagnostic), file=stream or sys.stderr)


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ClariceParseError(Exception):
    """Raised when a program was only parseable through recovery"""

    def __init__(self, diagnostics: List[Diagnostic]):
        self.diagnostics = list(diagnostics)
        self.message = format_diagnostics(self.diagnostics)
        super().__init__(self.message)


class ClariceCheckError(Exception):
    """First structural or type error found by the checker"""

    def __init__(self, message: str, statement: Optional[str] = None):
        self.message = message
        self.statement = statement
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.statement:
            return f"Check error in `{self.statement}`: {self.message}"
        return f"Check error: {self.message}"


class LoopLimitExceeded(Exception):
    """An unbounded `loop` crossed the iteration ceiling set by the caller"""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"loop stopped after {limit} iterations")
