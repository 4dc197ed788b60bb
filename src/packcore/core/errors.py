"""
core.errors — Error taxonomy for a packcore run.

Every fatal condition raises a ``PackcoreError`` subclass.  The pipeline
cleans up the staging directory and the CLI turns the error into a
non-zero exit with the message (and hint, when one exists).  Best-effort
steps such as the platform snapshot never raise these.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class PackcoreError(Exception):
    """Base class for all fatal packcore errors."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


class ConfigurationError(PackcoreError):
    """Missing or invalid input: no core, not a core, unresolvable binary."""


class ToolUnavailableError(PackcoreError):
    """A required external tool is not on the search path."""

    def __init__(self, tool: str, message: Optional[str] = None, *, hint: Optional[str] = None) -> None:
        super().__init__(message or f"Required tool '{tool}' was not found on PATH", hint=hint)
        self.tool = tool


def _enumerate(header: str, items: Sequence[str]) -> str:
    lines = [header]
    lines.extend(f"    {item}" for item in items)
    return "\n".join(lines)


class ResolutionError(PackcoreError):
    """Library resolution failed: tool error or unresolved dependencies."""

    def __init__(
        self,
        message: str,
        *,
        missing: Optional[Sequence[str]] = None,
        output: str = "",
        hint: Optional[str] = None,
    ) -> None:
        self.missing: List[str] = list(missing or [])
        if self.missing:
            message = _enumerate(message, self.missing)
        super().__init__(message, hint=hint)
        self.output = output


class ArtifactIOError(PackcoreError):
    """Creating, copying, or writing a staged file failed."""

    def __init__(self, message: str, *, path: Optional[str] = None, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class IntegrityError(PackcoreError):
    """The staging directory does not hold every expected artifact."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing: List[str] = list(missing)
        super().__init__(_enumerate("Bundle verification failed, missing:", self.missing))


class ArchiveError(PackcoreError):
    """Compressing the staging directory failed."""


class CollectionCancelled(PackcoreError):
    """The operator declined a confirmation prompt."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code
