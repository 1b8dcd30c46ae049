"""
Syntax tree traversal and exported-function extraction.

This module walks the TypeScript syntax tree, dispatches export statements
to the shape extractors, and attaches JSDoc comments to the results.
"""

import logging
from dataclasses import replace
from typing import List, Optional
from tree_sitter import Node, Tree

from tsanalyzer.config import (
    COMMENT_NODE,
    DEFAULT_EXPORT_ONLY,
    DEFAULT_INCLUDE_DOCUMENTATION,
    EXPORT_STATEMENT,
    FUNCTION_DECLARATION,
    JSDOC_PREFIX,
    PROGRAM_NODE,
    VARIABLE_CONTAINER_TYPES,
)
from tsanalyzer.models import FunctionRecord
from tsanalyzer.parser import node_text
from tsanalyzer.shapes import extract_declaration, extract_export_statement

logger = logging.getLogger(__name__)


def is_jsdoc_comment(comment_text: str) -> bool:
    """Check if a comment is a JSDoc block (``/** ... */``).

    Args:
        comment_text: The text content of the comment.

    Returns:
        True for ``/**`` blocks; ``/***`` separators and ``/**/`` are not docs.
    """
    stripped = comment_text.strip()
    if not stripped.startswith(JSDOC_PREFIX):
        return False
    return not stripped.startswith("/***") and stripped != "/**/"


def clean_jsdoc_comment(comment_text: str) -> str:
    """Strip JSDoc delimiters and leading asterisks.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text, one line per non-empty source line.
    """
    lines = comment_text.split('\n')
    cleaned_lines = []

    for idx, line in enumerate(lines):
        stripped = line.strip()

        if idx == 0 and stripped.startswith(JSDOC_PREFIX):
            stripped = stripped[len(JSDOC_PREFIX):].strip()

        if stripped.endswith('*/'):
            stripped = stripped[:-2].rstrip()

        # Continuation '*' in multiline blocks
        if stripped.startswith('*'):
            stripped = stripped[1:].lstrip()

        if stripped:
            cleaned_lines.append(stripped)

    return '\n'.join(cleaned_lines)


def get_preceding_jsdoc(node: Node, source_bytes: bytes) -> Optional[str]:
    """Find the JSDoc comment directly preceding a statement.

    Only the nearest comment is considered, and it must end at most one line
    above the statement.

    Args:
        node: The statement node (usually an export_statement).
        source_bytes: The raw source bytes.

    Returns:
        Cleaned JSDoc text, or None if there is no adjacent JSDoc block.
    """
    sibling = node.prev_named_sibling
    if sibling is None or sibling.type != COMMENT_NODE:
        return None

    gap = node.start_point.row - sibling.end_point.row
    if gap > 1:
        return None

    comment_text = node_text(sibling, source_bytes)
    if not is_jsdoc_comment(comment_text):
        return None

    cleaned = clean_jsdoc_comment(comment_text)
    return cleaned or None


def _is_top_level(node: Node) -> bool:
    parent = node.parent
    return parent is not None and parent.type == PROGRAM_NODE


def extract_from_node(
    node: Node,
    source_bytes: bytes,
    export_only: bool = DEFAULT_EXPORT_ONLY,
) -> List[FunctionRecord]:
    """Extract the functions a single node declares, if it is a recognized shape.

    Args:
        node: The node being visited.
        source_bytes: The raw source bytes.
        export_only: When False, top-level non-exported declarations count too.

    Returns:
        Extracted records; empty when the node is not a recognized shape.
    """
    if node.type == EXPORT_STATEMENT:
        return extract_export_statement(node, source_bytes)

    if not export_only and _is_top_level(node):
        if node.type == FUNCTION_DECLARATION or node.type in VARIABLE_CONTAINER_TYPES:
            return extract_declaration(node, source_bytes)

    return []


def walk(
    root: Node,
    source_bytes: bytes,
    export_only: bool = DEFAULT_EXPORT_ONLY,
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION,
) -> List[FunctionRecord]:
    """Pre-order walk collecting every recognized function.

    A statement that produced records is not descended into, so function
    bodies are never re-scanned. Every other node's children are visited in
    source order.

    Args:
        root: The node to start from (normally the tree's root).
        source_bytes: The raw source bytes.
        export_only: Whether only exported declarations are extracted.
        include_documentation: Whether to attach preceding JSDoc comments.

    Returns:
        Records in source order.
    """
    functions: List[FunctionRecord] = []
    stack = [root]

    while stack:
        node = stack.pop()

        extracted = extract_from_node(node, source_bytes, export_only=export_only)
        if extracted:
            if include_documentation:
                doc = get_preceding_jsdoc(node, source_bytes)
                if doc:
                    extracted = [replace(f, documentation=doc) for f in extracted]
            for function in extracted:
                logger.debug(
                    f"Extracted function {function.name} at line {node.start_point.row + 1}"
                )
            functions.extend(extracted)
            continue

        stack.extend(reversed(node.children))

    return functions


def extract_functions_from_tree(
    tree: Tree,
    source_bytes: bytes,
    export_only: bool = DEFAULT_EXPORT_ONLY,
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION,
) -> List[FunctionRecord]:
    """Extract all exported functions from a parsed TypeScript tree.

    This is the main entry point for tree-level extraction.

    Args:
        tree: The parsed syntax tree.
        source_bytes: The raw source bytes.
        export_only: Whether only exported declarations are extracted.
        include_documentation: Whether to attach preceding JSDoc comments.

    Returns:
        List of extracted functions in source order.
    """
    functions = walk(
        tree.root_node,
        source_bytes,
        export_only=export_only,
        include_documentation=include_documentation,
    )
    logger.debug(f"Extracted {len(functions)} functions from tree")
    return functions
