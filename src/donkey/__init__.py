"""Donkey: tokenizer and Pratt parser for a small C-like expression language."""

__version__ = "0.1.0"
