"""Command-line interface for annotated-xml-tree.

Parses, validates and streams XML files from the shell, printing trees as
JSON or as an indented outline annotated with source locations.
"""

from .main import main

__all__ = ["main"]
