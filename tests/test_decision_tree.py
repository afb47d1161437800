import io
import pytest
from cartpy import (
    Branch, DecisionTree, Leaf, Missing, MalformedRowError, Numeric, Text,
    UntrainedModelError, VariantMismatchError, build_tree, classify,
    find_best_split, leaf_probabilities,
)
from cartpy.tree import count_leaves, format_tree, tree_depth

HEADERS = ["color", "diameter", "label"]


def _fruit_rows():
    """The four-fruit dataset: color, diameter, label."""
    return [
        (Text("Green"), Numeric(3.0), Text("Apple")),
        (Text("Yellow"), Numeric(3.0), Text("Apple")),
        (Text("Red"), Numeric(1.0), Text("Grape")),
        (Text("Yellow"), Numeric(3.0), Text("Lemon")),
    ]


def test_fruit_best_split_is_diameter():
    gain, question = find_best_split(_fruit_rows(), HEADERS)
    assert gain > 0
    assert question.column == 1
    assert question.value == Numeric(3.0)
    assert str(question) == "Is diameter >= 3.0"


def test_fruit_tree_structure():
    root = build_tree(_fruit_rows(), HEADERS)
    assert isinstance(root, Branch)
    assert root.question.header == "diameter"
    # a single Grape is the only row below 3
    assert isinstance(root.false_branch, Leaf)
    assert dict(root.false_branch.predictions) == {"Grape": 1}
    assert count_leaves(root) == 3
    assert tree_depth(root) == 2


def test_fruit_classify_apple():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    predictions = model.classify((Text("Green"), Numeric(3.0), Text("Apple")))
    assert predictions["Apple"] == 1


def test_training_rows_land_on_their_label():
    rows = _fruit_rows()
    root = build_tree(rows, HEADERS)
    for row in rows:
        assert classify(row, root).get(row[-1].text, 0) >= 1


def test_classify_accepts_plain_values():
    model = DecisionTree(HEADERS)
    model.train([("Green", 3, "Apple"), ("Yellow", 3, "Apple"),
                 ("Red", 1, "Grape"), ("Yellow", 3, "Lemon")])
    assert dict(model.classify(("Red", 1))) == {"Grape": 1}
    assert dict(model.classify(("Yellow", 3))) == {"Apple": 1, "Lemon": 1}


def test_missing_cell_follows_false_branch():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    # diameter unknown -> diameter >= 3 is false -> Grape leaf
    assert dict(model.classify((Text("Green"), Missing()))) == {"Grape": 1}
    assert dict(model.classify((None, None))) == {"Grape": 1}


def test_leaf_predictions_are_read_only():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    predictions = model.classify(_fruit_rows()[2])
    with pytest.raises(TypeError):
        predictions["Grape"] = 5


def test_single_row_is_leaf():
    root = build_tree([(Numeric(1.0), Text("x"))], ["f", "label"])
    assert isinstance(root, Leaf)
    assert dict(root.predictions) == {"x": 1}


def test_no_informative_split_is_leaf():
    rows = [(Text("a"), Text("x")), (Text("a"), Text("y"))]
    root = build_tree(rows, ["f", "label"])
    assert dict(root.predictions) == {"x": 1, "y": 1}


def test_max_depth_zero_gives_root_leaf():
    model = DecisionTree(HEADERS, max_depth=0)
    model.train(_fruit_rows())
    assert isinstance(model.root, Leaf)
    assert dict(model.root.predictions) == {"Apple": 2, "Grape": 1, "Lemon": 1}


def test_retrain_replaces_tree():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    first = model.root
    model.train([("Red", 1, "Grape"), ("Red", 2, "Grape")])
    assert model.root is not first
    assert isinstance(model.root, Leaf)


def test_untrained_model_raises():
    model = DecisionTree(HEADERS)
    assert not model.is_trained
    with pytest.raises(UntrainedModelError):
        model.classify(("Green", 3))
    with pytest.raises(UntrainedModelError):
        model.print_tree()
    with pytest.raises(UntrainedModelError):
        model.print_predictions(_fruit_rows())


def test_train_rejects_malformed_rows():
    model = DecisionTree(HEADERS)
    with pytest.raises(MalformedRowError):
        model.train([])
    with pytest.raises(MalformedRowError):
        model.train([("Green", "Apple")])
    with pytest.raises(MalformedRowError):
        model.train([("Green", 3, 1)])
    with pytest.raises(VariantMismatchError):
        model.train([("Green", 3, "Apple"), (3, 3, "Grape")])
    assert not model.is_trained


def test_print_tree_format():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    buf = io.StringIO()
    model.print_tree(file=buf)
    lines = buf.getvalue().splitlines()
    assert lines[0] == "Is diameter >= 3.0"
    assert lines[1] == "-->True:"
    assert "-->False:" in lines
    assert lines[2].startswith("   Is color == ")
    assert "Predict {'Grape': 1}" in lines[-1]
    assert format_tree(model.root) == buf.getvalue().rstrip("\n")


def test_leaf_probabilities_use_total_count():
    assert leaf_probabilities({"Apple": 2, "Lemon": 1, "Grape": 1}) == {
        "Apple": "50%", "Lemon": "25%", "Grape": "25%",
    }
    assert leaf_probabilities({"Apple": 1}) == {"Apple": "100%"}
    assert leaf_probabilities({"A": 1, "B": 2}) == {"A": "33%", "B": "66%"}


def test_print_predictions():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    buf = io.StringIO()
    model.print_predictions(_fruit_rows(), file=buf)
    lines = buf.getvalue().splitlines()
    assert len(lines) == 4
    assert lines[2] == "{'Grape': '100%'}"


def test_export_rules_cover_every_leaf():
    model = DecisionTree(HEADERS)
    model.train(_fruit_rows())
    rules = model.export_rules()
    assert len(rules) == count_leaves(model.root)
    assert rules[-1] == "NOT (Is diameter >= 3.0) => {'Grape': 1}"


def test_root_leaf_rule():
    model = DecisionTree(["f", "label"])
    model.train([("a", "x")])
    assert model.export_rules() == ["<root> => {'x': 1}"]
