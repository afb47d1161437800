# -*- coding: utf-8 -*-
"""
cartpy.question
===============

A :class:`Question` is the test stored at every internal node of the tree: it
looks at a single column of a row and answers ``True`` or ``False``.

Numeric questions are thresholds (``cell >= value``), text questions are
equality tests (``cell == value``).  A :class:`~cartpy.values.Missing` cell
always answers ``False`` so rows with absent data follow the false branch.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import MalformedRowError, VariantMismatchError
from .values import Missing, Numeric, Row, Text, Value


@dataclass(frozen=True)
class Question:
    """Single-feature predicate over a row.

    Parameters
    ----------
    header : str
        Display name of the feature.
    column : int
        Index of the feature within a row.
    value : Value
        Threshold (Numeric) or category (Text) to compare against.
    """

    header: str
    column: int
    value: Value

    def match(self, row: Row) -> bool:
        """Evaluate the question against ``row``.

        Raises
        ------
        MalformedRowError
            If the row has no cell at ``column``.
        VariantMismatchError
            If the cell and the stored value are of different variants.
        """
        if self.column >= len(row):
            raise MalformedRowError(
                f"row has {len(row)} cells, question needs column {self.column}",
                expected=self.column + 1, actual=len(row),
            )
        cell = row[self.column]
        if isinstance(cell, Missing):
            return False
        if isinstance(cell, Numeric) and isinstance(self.value, Numeric):
            return cell.number >= self.value.number
        if isinstance(cell, Text) and isinstance(self.value, Text):
            return cell.text == self.value.text
        raise VariantMismatchError(
            f"cannot compare {type(cell).__name__} cell with "
            f"{type(self.value).__name__} question on {self.header!r}",
            column=self.column,
        )

    def describe(self) -> str:
        if isinstance(self.value, Numeric):
            condition = f">= {self.value.number}"
        elif isinstance(self.value, Text):
            condition = f"== {self.value.text}"
        else:
            condition = "?"
        return f"Is {self.header} {condition}"

    def __str__(self) -> str:
        return self.describe()
