"""
Function-shape recognition and extraction.

Each recognized syntax shape (exported declaration, default export, arrow
function or function expression assigned to a variable) has one extractor
returning a FunctionRecord or None.
"""

import logging
from enum import Enum
from typing import List, Optional
from tree_sitter import Node

from tsanalyzer.config import (
    ARROW_FUNCTION,
    ASYNC_MARKER,
    DECORATOR_NODE,
    DEFAULT_ARROW_RETURN_TYPE,
    DEFAULT_DECLARATION_RETURN_TYPE,
    DEFAULT_MARKER,
    FUNCTION_DECLARATION,
    FUNCTION_EXPRESSION_TYPES,
    IDENTIFIER_TYPES,
    VARIABLE_CONTAINER_TYPES,
    VARIABLE_DECLARATOR,
)
from tsanalyzer.models import FunctionRecord
from tsanalyzer.parameters import annotation_text, parse_parameters, single_parameter
from tsanalyzer.parser import node_text

logger = logging.getLogger(__name__)


class Shape(str, Enum):
    """Recognized syntax shapes for an exported function."""

    FUNCTION_DECLARATION = "function_declaration"
    DEFAULT_FUNCTION_DECLARATION = "default_function_declaration"
    ARROW_FUNCTION = "arrow_function"
    FUNCTION_EXPRESSION = "function_expression"


def has_async_marker(node: Node) -> bool:
    """Check whether a node has an ``async`` keyword among its children."""
    return any(child.type == ASYNC_MARKER for child in node.children)


def is_default_export(export_node: Node) -> bool:
    """Check whether an export statement carries the ``default`` marker."""
    return any(child.type == DEFAULT_MARKER for child in export_node.children)


def get_export_declaration(export_node: Node) -> Optional[Node]:
    """Get the declaration wrapped by an export statement.

    Falls back to the first named, non-decorator child when the grammar did
    not populate the ``declaration`` field (error recovery).

    Args:
        export_node: An export_statement node.

    Returns:
        The declaration node, or None.
    """
    declaration = export_node.child_by_field_name("declaration")
    if declaration is not None:
        return declaration

    for child in export_node.named_children:
        if child.type != DECORATOR_NODE:
            return child
    return None


def classify_declaration(declaration: Node, is_default: bool = False) -> Optional[Shape]:
    """Map a declaration node to a function shape.

    Args:
        declaration: The node declared by an export statement (or a
            top-level statement under the all-functions policy).
        is_default: Whether the enclosing export is ``export default``.

    Returns:
        The matching Shape, or None when the node is not a function.
    """
    if declaration.type == FUNCTION_DECLARATION:
        if is_default:
            return Shape.DEFAULT_FUNCTION_DECLARATION
        return Shape.FUNCTION_DECLARATION
    return None


def classify_value(value: Node) -> Optional[Shape]:
    """Map the value assigned by a variable declarator to a function shape."""
    if value.type == ARROW_FUNCTION:
        return Shape.ARROW_FUNCTION
    if value.is_named and value.type in FUNCTION_EXPRESSION_TYPES:
        return Shape.FUNCTION_EXPRESSION
    return None


def _return_type(node: Node, source_bytes: bytes, default: str) -> str:
    text = annotation_text(node.child_by_field_name("return_type"), source_bytes)
    return text or default


def _build_function_record(
    function_node: Node,
    source_bytes: bytes,
    name: str,
) -> FunctionRecord:
    """Build a record from a function_declaration or function expression."""
    params_node = function_node.child_by_field_name("parameters")
    parameters = parse_parameters(params_node, source_bytes) if params_node is not None else ()

    return FunctionRecord(
        name=name,
        parameters=parameters,
        return_type=_return_type(function_node, source_bytes, DEFAULT_DECLARATION_RETURN_TYPE),
        is_async=has_async_marker(function_node),
    )


def _extract_function_declaration(node: Node, source_bytes: bytes) -> Optional[FunctionRecord]:
    """Extract a named function declaration.

    Args:
        node: A function_declaration node.
        source_bytes: The raw source bytes.

    Returns:
        A FunctionRecord, or None when the declaration has no name.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        logger.debug(f"Function at line {node.start_point.row + 1} has no name")
        return None

    function_name = node_text(name_node, source_bytes)
    if not function_name:
        return None
    return _build_function_record(node, source_bytes, function_name)


def _extract_function_expression(
    node: Node,
    source_bytes: bytes,
    name: Optional[str] = None,
) -> Optional[FunctionRecord]:
    """Extract a function expression, named after its declarator.

    The expression itself may be anonymous; the declarator's name always wins.
    """
    if not name:
        return None
    return _build_function_record(node, source_bytes, name)


def _extract_arrow_function(
    node: Node,
    source_bytes: bytes,
    name: Optional[str] = None,
) -> Optional[FunctionRecord]:
    """Extract an arrow function assigned to a variable.

    Args:
        node: An arrow_function node.
        source_bytes: The raw source bytes.
        name: Name of the variable the arrow is assigned to.

    Returns:
        A FunctionRecord, or None when no name is available.
    """
    if not name:
        return None

    # The async keyword may sit on the arrow or on the assignment.
    is_async = has_async_marker(node)
    if not is_async and node.parent is not None:
        is_async = has_async_marker(node.parent)

    parameters = ()
    params_node = node.child_by_field_name("parameters")
    if params_node is not None:
        parameters = parse_parameters(params_node, source_bytes)
    else:
        lone_param = node.child_by_field_name("parameter")
        if lone_param is not None:
            parameters = (single_parameter(lone_param, source_bytes),)

    return FunctionRecord(
        name=name,
        parameters=parameters,
        return_type=_return_type(node, source_bytes, DEFAULT_ARROW_RETURN_TYPE),
        is_async=is_async,
    )


def extract_shape(
    shape: Shape,
    node: Node,
    source_bytes: bytes,
    name: Optional[str] = None,
) -> Optional[FunctionRecord]:
    """Run the extractor for a recognized shape.

    Any unexpected failure inside an extractor is logged and treated as a
    skip, so one malformed function never aborts the walk.

    Args:
        shape: The recognized shape.
        node: The function node (declaration, expression or arrow).
        source_bytes: The raw source bytes.
        name: Declarator name for variable-assigned shapes.

    Returns:
        The extracted FunctionRecord, or None if the node was skipped.
    """
    try:
        if shape in (Shape.FUNCTION_DECLARATION, Shape.DEFAULT_FUNCTION_DECLARATION):
            return _extract_function_declaration(node, source_bytes)
        elif shape is Shape.ARROW_FUNCTION:
            return _extract_arrow_function(node, source_bytes, name)
        elif shape is Shape.FUNCTION_EXPRESSION:
            return _extract_function_expression(node, source_bytes, name)
        return None
    except Exception as e:
        logger.warning(
            "Skipping %s at line %d: %s",
            shape.value,
            node.start_point.row + 1,
            e,
            exc_info=True,
        )
        return None


def extract_declarator(declarator: Node, source_bytes: bytes) -> Optional[FunctionRecord]:
    """Extract a function assigned by a single variable declarator.

    Args:
        declarator: A variable_declarator node.
        source_bytes: The raw source bytes.

    Returns:
        A FunctionRecord when the value is an arrow function or a function
        expression bound to a plain identifier, else None.
    """
    name_node = declarator.child_by_field_name("name")
    value_node = declarator.child_by_field_name("value")
    if name_node is None or value_node is None:
        return None
    if name_node.type not in IDENTIFIER_TYPES:
        return None

    shape = classify_value(value_node)
    if shape is None:
        return None

    return extract_shape(shape, value_node, source_bytes, name=node_text(name_node, source_bytes))


def extract_variable_declaration(container: Node, source_bytes: bytes) -> List[FunctionRecord]:
    """Extract every function-valued declarator of a const/let/var statement.

    Args:
        container: A lexical_declaration or variable_declaration node.
        source_bytes: The raw source bytes.

    Returns:
        Records in left-to-right declarator order.
    """
    functions = []
    for child in container.children:
        if child.type != VARIABLE_DECLARATOR:
            continue
        function = extract_declarator(child, source_bytes)
        if function is not None:
            functions.append(function)
    return functions


def extract_declaration(
    declaration: Node,
    source_bytes: bytes,
    is_default: bool = False,
) -> List[FunctionRecord]:
    """Extract all functions introduced by one declaration node.

    Args:
        declaration: A function_declaration, lexical_declaration or
            variable_declaration node.
        source_bytes: The raw source bytes.
        is_default: Whether the declaration is the target of ``export default``.

    Returns:
        Extracted records; empty when the declaration is not function-like.
    """
    if declaration.type in VARIABLE_CONTAINER_TYPES:
        return extract_variable_declaration(declaration, source_bytes)

    shape = classify_declaration(declaration, is_default=is_default)
    if shape is None:
        return []

    function = extract_shape(shape, declaration, source_bytes)
    return [function] if function is not None else []


def extract_export_statement(export_node: Node, source_bytes: bytes) -> List[FunctionRecord]:
    """Extract the functions exported by an export statement.

    Args:
        export_node: An export_statement node.
        source_bytes: The raw source bytes.

    Returns:
        Extracted records in source order.
    """
    declaration = get_export_declaration(export_node)
    if declaration is None:
        return []
    return extract_declaration(
        declaration,
        source_bytes,
        is_default=is_default_export(export_node),
    )
