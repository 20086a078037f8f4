"""Evaluator helper modules for the numlisp runtime."""

__all__ = [
    "common",
    "control",
    "calls",
    "fn",
    "let",
]
