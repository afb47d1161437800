# -*- coding: utf-8 -*-
"""
cartpy.tree
===========

This module implements a CART‑style binary classification tree.  Internal
nodes hold a :class:`~cartpy.question.Question` chosen by Gini information
gain; leaves hold the label counts of the training rows that reached them.
Numeric columns are split by thresholds (``>=``), text columns by equality,
and :class:`~cartpy.values.Missing` cells always follow the false branch.

Two entry points are provided:

* :class:`DecisionTree` works directly on rows of typed values whose last
  cell is the label, and exposes ``train``/``classify`` plus printing helpers.
* :class:`CARTClassifier` wraps it in a scikit‑learn style estimator
  (``fit``/``predict``/``predict_proba``) over plain tabular data.

The tree is not pruned; growth stops when no question has positive gain or,
optionally, when ``max_depth`` is reached.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence, Union

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin

from .exceptions import MalformedRowError, UntrainedModelError
from .question import Question
from .splitting import GAIN_TOLERANCE, class_count, find_best_split, partition
from .values import Row, as_value, check_rows, make_row


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    """Terminal node.

    Attributes
    ----------
    predictions : Mapping[str, int]
        Read‑only mapping ``label -> count`` over the training rows that
        reached this leaf.
    """

    predictions: Mapping[str, int]

    def __post_init__(self):
        object.__setattr__(self, "predictions", MappingProxyType(dict(self.predictions)))


@dataclass(frozen=True)
class Branch:
    """Internal node: rows matching ``question`` go to ``true_branch``."""

    question: Question
    true_branch: "Leaf | Branch"
    false_branch: "Leaf | Branch"


GraphNode = Union[Leaf, Branch]


# -----------------------------------------------------------------------------
# Construction / traversal
# -----------------------------------------------------------------------------
def build_tree(rows: Sequence[Row], headers: Sequence[str], *,
               max_depth: int | None = None, depth: int = 0) -> Leaf | Branch:
    """
    Recursively grow a tree over ``rows``.

    The best question is searched over the current rows.  When its gain is
    zero (or ``max_depth`` has been reached) a :class:`Leaf` with the label
    counts is returned; otherwise the rows are partitioned and both sides are
    grown in turn.

    Parameters
    ----------
    rows : sequence of rows
        Training rows; the last cell of each row is its :class:`Text` label.
    headers : sequence of str
        Column names, one per cell (label included).
    max_depth : int or None, default=None
        Maximum depth of the tree.  ``None`` grows until no split helps.
    depth : int, default=0
        Depth of the node being built.

    Returns
    -------
    Leaf or Branch
        Root of the grown subtree.
    """
    if max_depth is not None and depth >= int(max_depth):
        return _create_leaf(rows, depth)
    gain, question = find_best_split(rows, headers)
    if question is None or gain <= GAIN_TOLERANCE:
        return _create_leaf(rows, depth)
    true_rows, false_rows = partition(rows, question)
    true_branch = build_tree(true_rows, headers, max_depth=max_depth, depth=depth + 1)
    false_branch = build_tree(false_rows, headers, max_depth=max_depth, depth=depth + 1)
    return Branch(question, true_branch, false_branch)


def _create_leaf(rows, depth: int) -> Leaf:
    leaf = Leaf(class_count(rows))
    logger.trace("leaf at depth {}: {}", depth, dict(leaf.predictions))
    return leaf


def classify(row: Row, node: Leaf | Branch) -> Mapping[str, int]:
    """Return the label counts of the leaf ``row`` lands in.

    The returned mapping belongs to the tree and is read‑only.
    """
    while isinstance(node, Branch):
        node = node.true_branch if node.question.match(row) else node.false_branch
    return node.predictions


def count_leaves(node: Leaf | Branch) -> int:
    if isinstance(node, Leaf):
        return 1
    return count_leaves(node.true_branch) + count_leaves(node.false_branch)


def tree_depth(node: Leaf | Branch) -> int:
    if isinstance(node, Leaf):
        return 0
    return 1 + max(tree_depth(node.true_branch), tree_depth(node.false_branch))


# -----------------------------------------------------------------------------
# Rule export / printing helpers
# -----------------------------------------------------------------------------
def leaf_probabilities(predictions: Mapping[str, int]) -> dict[str, str]:
    """Render leaf counts as truncated percentages of the leaf's total count.

    >>> leaf_probabilities({"Apple": 1, "Lemon": 1})
    {'Apple': '50%', 'Lemon': '50%'}
    """
    total = float(sum(predictions.values()))
    probabilities: dict[str, str] = {}
    for label, count in predictions.items():
        pct = int(count / total * 100) if total > 0 else 0
        probabilities[label] = f"{pct}%"
    return probabilities


def format_tree(node: Leaf | Branch, spacing: str = "") -> str:
    lines: list[str] = []
    _format_node(node, spacing, lines)
    return "\n".join(lines)


def _format_node(node, spacing: str, lines: list[str]):
    if isinstance(node, Leaf):
        lines.append(f"{spacing}Predict {dict(node.predictions)}")
        return
    lines.append(f"{spacing}{node.question}")
    lines.append(f"{spacing}-->True:")
    _format_node(node.true_branch, spacing + "   ", lines)
    lines.append(f"{spacing}-->False:")
    _format_node(node.false_branch, spacing + "   ", lines)


def export_rules(node: Leaf | Branch) -> list[str]:
    """List one ``<antecedent> => <counts>`` rule per leaf, left to right."""
    rules: list[str] = []
    _collect_rules(node, [], rules)
    return rules


def _collect_rules(node, parts, rules):
    if isinstance(node, Leaf):
        body = " AND ".join(parts) if parts else "<root>"
        rules.append(f"{body} => {dict(node.predictions)}")
        return
    cond = node.question.describe()
    _collect_rules(node.true_branch, parts + [cond], rules)
    _collect_rules(node.false_branch, parts + [f"NOT ({cond})"], rules)


def _add_graph_nodes(dot, node, name: str):
    if isinstance(node, Leaf):
        dot.node(name, f"Predict\n{dict(node.predictions)}",
                 shape="box", style="filled", color="lightgrey")
        return
    dot.node(name, node.question.describe(), shape="ellipse", style="filled", color="lightblue")
    t_id, f_id = name + "T", name + "F"
    _add_graph_nodes(dot, node.true_branch, t_id)
    _add_graph_nodes(dot, node.false_branch, f_id)
    dot.edge(name, t_id, label="True")
    dot.edge(name, f_id, label="False")


def export_graphviz(node: Leaf | Branch, filename: str | None = None, *, format: str = "png") -> str:
    """
    Export a tree in Graphviz format.

    Parameters
    ----------
    node : Leaf or Branch
        Root of the tree to draw.
    filename : str or None, default=None
        Basename of the output file (the extension is determined by
        ``format``).  If None, the DOT source is returned and no file is
        written.
    format : str, default="png"
        Graphviz output format.  ``'dot'`` writes the DOT source directly and
        does not call the external ``dot`` command.

    Returns
    -------
    str
        Path to the written file, or the DOT source if filename is None.

    Raises
    ------
    RuntimeError
        If the ``graphviz`` package is not installed.
    """
    try:
        import graphviz
    except ImportError:
        raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
    dot = graphviz.Digraph(format=format)
    _add_graph_nodes(dot, node, "0")

    if filename is None:
        return dot.source
    if format.lower() == "dot":
        path = f"{filename}.dot"
        dot.save(path)
        return path
    try:
        dot.render(filename, cleanup=True)
        return f"{filename}.{format}"
    except graphviz.ExecutableNotFound:
        logger.warning("Graphviz 'dot' executable not found; writing DOT source instead")
        fallback_path = f"{filename}.dot"
        dot.save(fallback_path)
        return fallback_path


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------
def _coerce_row(row) -> Row:
    return tuple(as_value(cell) for cell in row)


class DecisionTree:
    """
    Classification tree over rows of typed values.

    Parameters
    ----------
    headers : sequence of str
        One name per row cell; the last one names the label column.
    max_depth : int or None, default=None
        Maximum depth of the tree.  If ``None`` the depth is unbounded, which
        on all‑distinct numeric data can reach the number of rows.

    Attributes
    ----------
    tree_ : Leaf or Branch or None
        Root of the trained tree; ``None`` until :meth:`train` is called.

    Examples
    --------
    >>> model = DecisionTree(["color", "diameter", "label"])
    >>> model.train([("Green", 3, "Apple"), ("Red", 1, "Grape")])
    >>> dict(model.classify(("Red", 1)))
    {'Grape': 1}
    """

    def __init__(self, headers: Sequence[str], *, max_depth: int | None = None):
        self.headers = list(headers)
        self.max_depth = max_depth
        self.tree_: Leaf | Branch | None = None

    @property
    def root(self) -> Leaf | Branch:
        if self.tree_ is None:
            raise UntrainedModelError()
        return self.tree_

    @property
    def is_trained(self) -> bool:
        return self.tree_ is not None

    def train(self, rows: Sequence[Sequence]) -> None:
        """
        Grow a tree on ``rows`` and store it, replacing any previous tree.

        Cells may be typed values or plain scalars (converted with
        :func:`~cartpy.values.as_value`); the last cell must be a text label.

        Raises
        ------
        MalformedRowError
            If ``rows`` is empty, a row does not have ``len(headers)`` cells
            or a label is not text.
        VariantMismatchError
            If a column mixes numeric and text cells.
        """
        rows = [_coerce_row(r) for r in rows]
        check_rows(rows, width=len(self.headers))
        tree = build_tree(rows, self.headers, max_depth=self.max_depth)
        self.tree_ = tree
        logger.info("trained tree on {} rows: {} leaves, depth {}",
                    len(rows), count_leaves(tree), tree_depth(tree))

    def classify(self, row: Sequence) -> Mapping[str, int]:
        """Label counts of the leaf ``row`` lands in (label cell optional)."""
        return classify(_coerce_row(row), self.root)

    def print_tree(self, spacing: str = "", file=None):
        print(format_tree(self.root, spacing), file=file)

    def print_predictions(self, rows: Sequence[Sequence], file=None):
        root = self.root
        for row in rows:
            print(leaf_probabilities(classify(_coerce_row(row), root)), file=file)

    def export_rules(self) -> list[str]:
        return export_rules(self.root)

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        return export_graphviz(self.root, filename, format=format)


# -----------------------------------------------------------------------------
# Estimator
# -----------------------------------------------------------------------------
class CARTClassifier(ClassifierMixin, BaseEstimator):
    """
    Gini decision tree classifier with a scikit‑learn style API.

    Numeric cells become threshold splits and string cells equality splits;
    ``None``/NaN cells are treated as missing and always take the false
    branch.  Labels may be of any type with a distinct string form; they are
    stored as text inside the tree and mapped back on prediction.

    Parameters
    ----------
    feature_names : list[str] or None, default=None
        Names used in questions, printed trees and exports.  Defaults to
        ``f0, f1, ...``.
    max_depth : int or None, default=None
        Maximum depth of the tree.  If ``None`` the depth is unbounded.

    Attributes
    ----------
    classes_ : ndarray
        Sorted class labels seen in ``fit``.
    n_features_in_ : int
        Number of features seen in ``fit``.
    feature_names_ : list[str]
        Feature names used by the fitted tree.
    model_ : DecisionTree
        Underlying fitted model.
    tree_ : Leaf or Branch
        Root of the fitted tree.
    """

    def __init__(self, *, feature_names: list[str] | None = None, max_depth: int | None = None):
        self.feature_names = feature_names
        self.max_depth = max_depth

    def fit(self, X, y, feature_names=None):
        X = np.asarray(X, dtype=object)
        y = np.asarray(y)
        if X.ndim != 2:
            raise ValueError(f"X must be 2-dimensional, got shape {X.shape}")
        if len(X) != len(y):
            raise ValueError("X and y must have the same number of samples")

        n_features = X.shape[1]
        names = feature_names if feature_names is not None else self.feature_names
        if names is None:
            names = [f"f{i}" for i in range(n_features)]
        if len(names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")
        self.feature_names_ = [str(n) for n in names]
        self.n_features_in_ = n_features

        self.classes_ = np.unique(y)
        if len({str(c) for c in self.classes_}) != len(self.classes_):
            raise ValueError("class labels must have distinct string representations")

        rows = [make_row(x, label) for x, label in zip(X, y)]
        self.model_ = DecisionTree(self.feature_names_ + ["label"], max_depth=self.max_depth)
        self.model_.train(rows)
        self.tree_ = self.model_.root
        return self

    def _check_fitted(self) -> DecisionTree:
        model = getattr(self, "model_", None)
        if model is None:
            raise UntrainedModelError("Estimator not fitted. Call fit(...) first.")
        return model

    def _rows(self, X):
        X = np.asarray(X, dtype=object)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise MalformedRowError(
                f"X has shape {X.shape}, expected (n_samples, {self.n_features_in_})",
                expected=self.n_features_in_, actual=X.shape[-1] if X.ndim else 0,
            )
        return [_coerce_row(x) for x in X]

    def predict_proba(self, X):
        """
        Predict class probabilities for the provided samples.

        Each row receives the label counts of its leaf divided by the leaf's
        total count, ordered like :attr:`classes_`.

        Returns
        -------
        ndarray of shape (n_samples, n_classes)
        """
        model = self._check_fitted()
        root = model.root
        out = np.zeros((0, len(self.classes_)), dtype=float)
        rows = self._rows(X)
        if rows:
            out = np.array([self._proba_instance(classify(r, root)) for r in rows])
        return out

    def _proba_instance(self, counts: Mapping[str, int]) -> np.ndarray:
        vec = np.array([counts.get(str(c), 0) for c in self.classes_], dtype=float)
        tot = vec.sum()
        return vec / tot if tot > 0 else vec

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        The label with the largest count in each sample's leaf is returned;
        ties go to the first label in :attr:`classes_`.

        Returns
        -------
        ndarray of shape (n_samples,)
        """
        self._check_fitted()
        proba = self.predict_proba(X)
        return self.classes_[np.argmax(proba, axis=1)]

    def print_tree(self, file=None):
        self._check_fitted().print_tree(file=file)

    def export_rules(self) -> list[str]:
        return self._check_fitted().export_rules()

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        return self._check_fitted().export_graphviz(filename, format=format)
