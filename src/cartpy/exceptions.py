"""Exceptions raised by cartpy.

Precondition errors (subclass ValueError):
- PreconditionError: Base class for malformed input. Catch this to handle any
  invalid row, label or variant combination.
- MalformedRowError: Raised for wrong row lengths, non-Text labels and empty
  training sets.
- VariantMismatchError: Raised when a comparison would mix value variants,
  e.g. a numeric question evaluated against a text cell. Also a TypeError.

Usage errors:
- UntrainedModelError: Raised when classifying or printing before training.
  Subclasses scikit-learn's NotFittedError.
"""

from __future__ import annotations

from sklearn.exceptions import NotFittedError


class PreconditionError(ValueError):
    """Base class for malformed input handed to the tree."""


class MalformedRowError(PreconditionError):
    """Raised when a row does not have the shape the tree expects.

    Attributes:
        row_index (int | None): Position of the offending row, when known.
        expected (int | None): Expected row length.
        actual (int | None): Observed row length.

    Examples:
        >>> err = MalformedRowError("row 2 is short", row_index=2, expected=3, actual=2)
        >>> err.row_index
        2
    """

    def __init__(
        self,
        message: str,
        *,
        row_index: int | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.expected = expected
        self.actual = actual


class VariantMismatchError(PreconditionError, TypeError):
    """Raised when two cells of different variants would be compared.

    Attributes:
        row_index (int | None): Position of the offending row, when known.
        column (int | None): Column holding the offending cell, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        row_index: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.column = column


class UntrainedModelError(NotFittedError):
    """Raised when a model is used before ``train``/``fit`` has been called."""

    def __init__(self, message: str = "no trained tree; call train(...) or fit(...) first.") -> None:
        super().__init__(message)
