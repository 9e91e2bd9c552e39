#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/ast/visitors.py
"""Visitor pattern implementation for element tree traversal.

:meth:`Element.accept` dispatches to one of four visit methods depending on
the element's role: the document root, a text leaf, a broken tag, or any
other element.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bb2html.ast.nodes import ARGUMENT_KINDS, Element, GroupKind
from bb2html.exceptions import TreeInvariantError


class NodeVisitor(ABC):
    """Abstract base class for element tree visitors.

    Examples
    --------
    A visitor that counts elements:

        >>> class ElementCounter(NodeVisitor):
        ...     def __init__(self):
        ...         self.count = 0
        ...
        ...     def generic_visit(self, node):
        ...         self.count += 1
        ...         for child in node.children:
        ...             child.accept(self)
        ...
        ...     visit_document = visit_text = visit_broken = visit_element = generic_visit

    """

    @abstractmethod
    def visit_document(self, node: Element) -> Any:
        """Visit the DOCUMENT root."""
        pass

    @abstractmethod
    def visit_text(self, node: Element) -> Any:
        """Visit a TEXT leaf."""
        pass

    @abstractmethod
    def visit_broken(self, node: Element) -> Any:
        """Visit an element whose tag was invalid."""
        pass

    @abstractmethod
    def visit_element(self, node: Element) -> Any:
        """Visit any other element."""
        pass

    def generic_visit(self, node: Element) -> Any:
        """Visit all children of ``node`` in order."""
        for child in node.children:
            child.accept(self)


class TreeValidator(NodeVisitor):
    """Visitor that checks the structural invariants of a finished tree.

    The checks are:

    - the root is the only DOCUMENT element
    - void and text elements have no children
    - only TEXT elements carry text
    - arguments appear only on kinds that accept one
    - broken elements record their own kind as the underlying kind

    Parameters
    ----------
    strict : bool, default = True
        Raise :class:`TreeInvariantError` on the first violation. When False,
        violations are only collected in ``errors``.

    """

    def __init__(self, strict: bool = True):
        """Initialize the validator."""
        self.strict = strict
        self.errors: list[str] = []
        self._depth = 0

    def _add_error(self, message: str, node: Element) -> None:
        self.errors.append(message)
        if self.strict:
            raise TreeInvariantError(message, node.kind.value)

    def _check_common(self, node: Element) -> None:
        if node.is_void and node.children:
            self._add_error(f"void {node.kind.value} element has children", node)
        if not node.is_text and node.text is not None:
            self._add_error(f"{node.kind.value} element carries text", node)
        if node.argument is not None and node.kind not in ARGUMENT_KINDS:
            self._add_error(f"{node.kind.value} element carries an argument", node)
        if node.kind is GroupKind.DOCUMENT and self._depth > 0:
            self._add_error("nested document element", node)

    def _descend(self, node: Element) -> None:
        self._depth += 1
        try:
            self.generic_visit(node)
        finally:
            self._depth -= 1

    def visit_document(self, node: Element) -> None:
        """Validate the root and its subtree."""
        self._check_common(node)
        self._descend(node)

    def visit_text(self, node: Element) -> None:
        """Validate a text leaf."""
        if node.children:
            self._add_error("text element has children", node)
        if node.text is None:
            self._add_error("text element has no text", node)

    def visit_broken(self, node: Element) -> None:
        """Validate a broken element."""
        self._check_common(node)
        if node.broken is not None and node.broken.underlying is not node.kind:
            self._add_error(
                f"broken element of kind {node.kind.value} records {node.broken.underlying.value}", node
            )
        self._descend(node)

    def visit_element(self, node: Element) -> None:
        """Validate a regular element."""
        self._check_common(node)
        self._descend(node)


def validate_tree(tree: Element, strict: bool = True) -> list[str]:
    """Check ``tree`` against the element tree invariants.

    Parameters
    ----------
    tree : Element
        Root of the tree; must be a DOCUMENT element
    strict : bool, default = True
        Raise on the first violation instead of collecting all of them

    Returns
    -------
    list of str
        Violation messages (always empty in strict mode)

    Raises
    ------
    TreeInvariantError
        In strict mode, if any invariant is violated.

    """
    validator = TreeValidator(strict=strict)
    if tree.kind is not GroupKind.DOCUMENT:
        validator._add_error(f"tree root must be a document, got {tree.kind.value}", tree)
    tree.accept(validator)
    return validator.errors
