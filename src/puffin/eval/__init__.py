"""Evaluator helper modules for the Puffin runtime."""

__all__ = [
    "blocks",
    "expr",
    "literals",
    "loops",
    "mutation",
    "postfix",
    "shunting_yard",
]
