# -*- coding: utf-8 -*-
"""
cartpy.splitting
================

Gini impurity, information gain and the exhaustive search for the question
that best splits a set of rows.

The search visits every feature column in ascending order and, within a
column, every distinct value in the order it first appears.  A candidate whose
gain is greater than *or equal to* the best seen so far replaces it, so among
tied candidates the last one visited wins.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from loguru import logger

from .exceptions import PreconditionError
from .question import Question
from .values import Missing, Row, label_of

# gains at or below this are rounding noise, not information
GAIN_TOLERANCE = 1e-12


# -----------------------------------------------------------------------------
# Impurity
# -----------------------------------------------------------------------------
def class_count(rows: Sequence[Row]) -> dict[str, int]:
    """Count how many rows carry each label.

    Returns
    -------
    dict
        Mapping ``label -> count``, labels in first-seen order.
    """
    counts: dict[str, int] = {}
    for row in rows:
        label = label_of(row)
        counts[label] = counts.get(label, 0) + 1
    return counts


def _gini(dist_vec: np.ndarray) -> float:
    tot = dist_vec.sum()
    if tot <= 0:
        return 0.0
    p = dist_vec / tot
    return float(1.0 - np.sum(p * p))


def gini_impurity(rows: Sequence[Row]) -> float:
    """Gini impurity ``1 - sum(p_label ** 2)``; 0.0 for an empty set."""
    counts = class_count(rows)
    return _gini(np.fromiter(counts.values(), dtype=float, count=len(counts)))


def information_gain(left: Sequence[Row], right: Sequence[Row], parent_impurity: float) -> float:
    """Impurity reduction achieved by splitting into ``left`` and ``right``.

    Parameters
    ----------
    left, right : sequence of rows
        The two sides of the split.  At least one must be non-empty, else
        :class:`~cartpy.exceptions.PreconditionError` is raised.
    parent_impurity : float
        Gini impurity of ``left + right``.
    """
    total = len(left) + len(right)
    if total == 0:
        raise PreconditionError("information gain needs at least one row")
    p = len(left) / float(total)
    return parent_impurity - p * gini_impurity(left) - (1 - p) * gini_impurity(right)


# -----------------------------------------------------------------------------
# Split search
# -----------------------------------------------------------------------------
def partition(rows: Sequence[Row], question: Question) -> tuple[list[Row], list[Row]]:
    """Split ``rows`` into those matching ``question`` and the rest (order kept)."""
    true_rows: list[Row] = []
    false_rows: list[Row] = []
    for row in rows:
        if question.match(row):
            true_rows.append(row)
        else:
            false_rows.append(row)
    return true_rows, false_rows


def _distinct_values(rows: Sequence[Row], col: int) -> list:
    # first-seen order; Missing is never proposed as a threshold
    return list(dict.fromkeys(row[col] for row in rows if not isinstance(row[col], Missing)))


def find_best_split(rows: Sequence[Row], headers: Sequence[str]) -> tuple[float, Question | None]:
    """Find the question with the highest information gain.

    Every feature column (all but the last) and every distinct value in it is
    tried.  Splits that leave one side empty are skipped.

    Parameters
    ----------
    rows : sequence of rows
        Non-empty set of rows to split.
    headers : sequence of str
        Column names; ``headers[col]`` labels the question on ``col``.

    Returns
    -------
    tuple
        ``(best_gain, best_question)``.  ``(0.0, None)`` when no split gains more
        than ``GAIN_TOLERANCE``.
    """
    best_gain, best_question = 0.0, None
    if not rows:
        return best_gain, best_question
    current_uncertainty = gini_impurity(rows)
    n_features = len(rows[0]) - 1

    for col in range(n_features):
        for v in _distinct_values(rows, col):
            question = Question(headers[col], col, v)
            true_rows, false_rows = partition(rows, question)
            if not true_rows or not false_rows:
                continue
            gain = information_gain(true_rows, false_rows, current_uncertainty)
            if gain > GAIN_TOLERANCE and gain >= best_gain:
                best_gain, best_question = gain, question

    if best_question is not None:
        logger.debug("best split {} (gain={:.4f}, rows={})", best_question, best_gain, len(rows))
    return best_gain, best_question
