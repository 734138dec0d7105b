"""
dp Formatter Package

Renders parsed dp files as canonical source text.

Key Features:
- Idempotent output: formatting formatted code is a no-op
- Two-pass column alignment of declarations, parameters and fields
- Trailing comment alignment
- Import merging, namespace resolution and sorting
- Precedence-aware expression spacing and parenthesization

Author: xwest
"""

from .formatter import Formatter, format_file
from .writer import Writer
from .imports import split_commented_nodes, merge_imports
from .namespace import unquote_import_path, import_path_namespaces, import_path_group

__all__ = [
    "Formatter",
    "format_file",
    "Writer",
    "split_commented_nodes",
    "merge_imports",
    "unquote_import_path",
    "import_path_namespaces",
    "import_path_group",
]
