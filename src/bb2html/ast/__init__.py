#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/ast/__init__.py
"""Element tree types, visitors and serialization."""

from bb2html.ast.nodes import BrokenInfo, Element, GroupKind
from bb2html.ast.serialization import dict_to_element, element_to_dict, json_to_tree, tree_to_json
from bb2html.ast.visitors import NodeVisitor, TreeValidator, validate_tree

__all__ = [
    "BrokenInfo",
    "Element",
    "GroupKind",
    "NodeVisitor",
    "TreeValidator",
    "validate_tree",
    "element_to_dict",
    "dict_to_element",
    "tree_to_json",
    "json_to_tree",
]
