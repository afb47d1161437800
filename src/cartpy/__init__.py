# cartpy/__init__.py
"""
cartpy: CART-style Gini decision trees over mixed numeric/text data.

Exports:
    - DecisionTree, CARTClassifier
    - Numeric, Text, Missing, Question, Branch, Leaf
    - enable_logging
"""
from .logging import enable_logging
from .exceptions import (
    MalformedRowError,
    PreconditionError,
    UntrainedModelError,
    VariantMismatchError,
)
from .values import MISSING, Missing, Numeric, Text, as_value, make_row
from .question import Question
from .splitting import class_count, find_best_split, gini_impurity, information_gain, partition
from .tree import Branch, CARTClassifier, DecisionTree, Leaf, build_tree, classify, leaf_probabilities

__all__ = [
    "Branch",
    "CARTClassifier",
    "DecisionTree",
    "Leaf",
    "MISSING",
    "MalformedRowError",
    "Missing",
    "Numeric",
    "PreconditionError",
    "Question",
    "Text",
    "UntrainedModelError",
    "VariantMismatchError",
    "as_value",
    "build_tree",
    "class_count",
    "classify",
    "enable_logging",
    "find_best_split",
    "gini_impurity",
    "information_gain",
    "leaf_probabilities",
    "make_row",
    "partition",
]
__version__ = "0.1.0"
