# -*- coding: utf-8 -*-
"""
cartpy.values
=============

Typed cell values used by the tree.  Every cell of a row is exactly one of
:class:`Numeric`, :class:`Text` or :class:`Missing`; the label (last cell of a
row) is always a :class:`Text`.

Comparisons are only meaningful between cells of the same variant.  All rows
handed to one training or inference call must agree on the variant of each
column; :func:`check_rows` verifies this before a tree is grown.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, Sequence, Union

import numpy as np

from .exceptions import MalformedRowError, VariantMismatchError


# -----------------------------------------------------------------------------
# Variants
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Numeric:
    """A numeric cell; questions on it are thresholds (``>=``)."""

    number: float

    def __str__(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class Text:
    """A categorical cell; questions on it are equality tests."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, eq=False)
class Missing:
    """An absent cell.  It never matches anything, not even another Missing."""

    def __str__(self) -> str:
        return "?"


Value = Union[Numeric, Text, Missing]
Row = tuple  # tuple[Value, ...]; last element is the Text label

MISSING = Missing()


# -----------------------------------------------------------------------------
# Coercion helpers
# -----------------------------------------------------------------------------
def _isnan_scalar(v) -> bool:
    return (v is None) or (isinstance(v, (float, np.floating)) and np.isnan(v))


def as_value(obj: Any) -> Value:
    """Convert a plain Python / numpy scalar into a :data:`Value`.

    ``None`` and NaN become :class:`Missing`, real numbers (``bool`` included)
    become :class:`Numeric` and strings become :class:`Text`.  Values already
    wrapped are returned unchanged.

    Raises
    ------
    VariantMismatchError
        If ``obj`` cannot be represented by any variant.
    """
    if isinstance(obj, (Numeric, Text, Missing)):
        return obj
    if _isnan_scalar(obj):
        return MISSING
    if isinstance(obj, str):
        return Text(obj)
    if isinstance(obj, numbers.Real):
        return Numeric(float(obj))
    raise VariantMismatchError(
        f"cannot convert {obj!r} of type {type(obj).__name__} to a cell value"
    )


def make_row(features: Sequence[Any], label: Any) -> Row:
    """Build an immutable row from raw feature values and a label."""
    return tuple(as_value(f) for f in features) + (Text(str(label)),)


def label_of(row: Row) -> str:
    label = row[-1] if len(row) else None
    if not isinstance(label, Text):
        raise MalformedRowError(f"row label must be Text, got {label!r}")
    return label.text


def check_rows(rows: Sequence[Row], width: int | None = None) -> None:
    """Validate rows before training.

    Checks that the set is non-empty, that every row has the same length
    (``width`` when given, typically ``len(headers)``), that every label is a
    :class:`Text` and that each feature column holds a single variant apart
    from :class:`Missing` cells.
    """
    if len(rows) == 0:
        raise MalformedRowError("cannot train on an empty row set")
    expected = len(rows[0]) if width is None else int(width)
    if expected < 2:
        raise MalformedRowError(
            "rows need at least one feature and a label", expected=2, actual=expected
        )
    kinds: list[type | None] = [None] * (expected - 1)
    for i, row in enumerate(rows):
        if len(row) != expected:
            raise MalformedRowError(
                f"row {i} has {len(row)} cells, expected {expected}",
                row_index=i, expected=expected, actual=len(row),
            )
        if not isinstance(row[-1], Text):
            raise MalformedRowError(
                f"row {i} label must be Text, got {row[-1]!r}", row_index=i
            )
        for col in range(expected - 1):
            cell = row[col]
            if isinstance(cell, Missing):
                continue
            if not isinstance(cell, (Numeric, Text)):
                raise VariantMismatchError(
                    f"row {i} column {col} holds {cell!r}, not a cell value",
                    row_index=i, column=col,
                )
            if kinds[col] is None:
                kinds[col] = type(cell)
            elif kinds[col] is not type(cell):
                raise VariantMismatchError(
                    f"column {col} mixes {kinds[col].__name__} and "
                    f"{type(cell).__name__} (row {i})",
                    row_index=i, column=col,
                )
