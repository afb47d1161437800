from cartpy import CARTClassifier, DecisionTree, Numeric, Text, enable_logging

headers = ["color", "diameter", "label"]
train_data = [
    (Text("Green"), Numeric(3.0), Text("Apple")),
    (Text("Yellow"), Numeric(3.0), Text("Apple")),
    (Text("Red"), Numeric(1.0), Text("Grape")),
    (Text("Yellow"), Numeric(3.0), Text("Lemon")),
]

with enable_logging(level="DEBUG"):
    tree = DecisionTree(headers)
    tree.train(train_data)

tree.print_tree()
print("----")
tree.print_predictions(train_data)

# Same data through the scikit-learn style estimator
X = [[str(r[0]), r[1].number] for r in train_data]
y = [str(r[2]) for r in train_data]
clf = CARTClassifier(feature_names=headers[:-1]).fit(X, y)
print(clf.predict_proba(X))
try:
    print(clf.export_graphviz())
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
