#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/ast/serialization.py
"""JSON serialization and deserialization for element trees.

Each element becomes a JSON object with a ``kind`` key. Keys whose value
equals the element default are omitted, which keeps dumps of real posts
readable.

Examples
--------
    >>> from bb2html.api import parse_bbcode
    >>> from bb2html.ast.serialization import json_to_tree, tree_to_json
    >>>
    >>> tree = parse_bbcode("[b]Hello[/b]")
    >>> restored = json_to_tree(tree_to_json(tree, indent=2))
    >>> restored.children[0].children[0].kind
    <GroupKind.BOLD: 'bold'>

"""

from __future__ import annotations

import json
from typing import Any, Optional

from bb2html.ast.nodes import BrokenInfo, Element, GroupKind


def element_to_dict(node: Element) -> dict[str, Any]:
    """Convert an element and its subtree to a JSON-compatible dictionary.

    Parameters
    ----------
    node : Element
        Element to convert

    Returns
    -------
    dict
        Dictionary representation of the element

    """
    result: dict[str, Any] = {"kind": node.kind.value}
    if node.argument is not None:
        result["argument"] = node.argument
    if node.text is not None:
        result["text"] = node.text
    if node.is_void:
        result["void"] = True
    if node.is_explicit:
        result["explicit"] = True
    if node.is_detachable != (not node.is_text):
        result["detachable"] = node.is_detachable
    if node.broken is not None:
        result["broken"] = {"underlying": node.broken.underlying.value, "original_name": node.broken.original_name}
    if node.children:
        result["children"] = [element_to_dict(child) for child in node.children]
    return result


def _parse_kind(value: Any) -> GroupKind:
    try:
        return GroupKind(value)
    except ValueError:
        raise ValueError(f"Unknown element kind: {value!r}") from None


def dict_to_element(data: dict[str, Any]) -> Element:
    """Convert a dictionary produced by :func:`element_to_dict` back to an element.

    Parameters
    ----------
    data : dict
        Dictionary representation of an element

    Returns
    -------
    Element
        Reconstructed element

    Raises
    ------
    ValueError
        If the dictionary is missing the kind or names an unknown kind

    """
    if not isinstance(data, dict) or "kind" not in data:
        raise ValueError("Element dictionary must be an object with a 'kind' key")

    kind = _parse_kind(data["kind"])
    broken: Optional[BrokenInfo] = None
    if data.get("broken") is not None:
        broken_data = data["broken"]
        broken = BrokenInfo(_parse_kind(broken_data["underlying"]), str(broken_data["original_name"]))

    return Element(
        kind=kind,
        argument=data.get("argument"),
        text=data.get("text"),
        children=[dict_to_element(child) for child in data.get("children", [])],
        is_void=bool(data.get("void", False)),
        is_explicit=bool(data.get("explicit", False)),
        is_detachable=bool(data.get("detachable", kind is not GroupKind.TEXT)),
        broken=broken,
    )


def tree_to_json(tree: Element, indent: Optional[int] = None) -> str:
    """Serialize an element tree to a JSON string.

    Parameters
    ----------
    tree : Element
        Root element
    indent : int, optional
        Indentation for pretty-printing

    Returns
    -------
    str
        JSON representation

    """
    return json.dumps(element_to_dict(tree), indent=indent, ensure_ascii=False)


def json_to_tree(json_str: str) -> Element:
    """Deserialize an element tree from a JSON string.

    Raises
    ------
    ValueError
        If the JSON is invalid or does not describe an element tree

    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    return dict_to_element(data)
