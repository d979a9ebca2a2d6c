"""Error types raised by the correlation pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class CorrelateError(Exception):
    """Base class for all pipeline errors."""


class DimensionMismatch(CorrelateError, ValueError):
    """Paired sequences passed to a metric have different lengths."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected {expected} predictions, got {actual}")
        self.expected = expected
        self.actual = actual


class EmptyInput(CorrelateError, ValueError):
    """A metric was computed over zero examples."""


class UnmappedValue(CorrelateError, KeyError):
    """A label has no entry in the rescaling map."""

    def __init__(self, value):
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"No mapping for label value {self.value!r}"


class TrainerProcessFailure(CorrelateError, RuntimeError):
    """The external trainer exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str):
        message = f"Trainer command {' '.join(command)!r} failed with exit code {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
