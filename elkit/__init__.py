"""Shell-style line tokenizing and vis/unvis visual encoding of strings."""

__version__ = "0.1.0"

__all__ = ["flags", "tokenizer", "unvis", "vis"]