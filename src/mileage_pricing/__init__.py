"""Single-feature price regression trained with batch gradient descent."""

__version__ = "0.1.0"
