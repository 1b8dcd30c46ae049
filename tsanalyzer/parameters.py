"""
Formal parameter extraction.

Turns a ``formal_parameters`` node into ordered ParameterRecord values and
provides the shared type-annotation reader used for return types.
"""

import logging
from typing import List, Optional, Tuple
from tree_sitter import Node

from tsanalyzer.config import (
    ANNOTATION_SEPARATOR,
    DEFAULT_PARAMETER_TYPE,
    OPTIONAL_PARAMETER,
    PARAMETER_NAME_TYPES,
    PARAMETER_PUNCTUATION,
    REQUIRED_PARAMETER,
)
from tsanalyzer.models import ParameterRecord
from tsanalyzer.parser import node_text

logger = logging.getLogger(__name__)


def annotation_text(annotation: Optional[Node], source_bytes: bytes) -> Optional[str]:
    """Read the type text of a type annotation node.

    The annotation node spans ``: T``; the separating colon is skipped and
    the first remaining child is returned verbatim (trimmed).

    Args:
        annotation: A type_annotation node, or None.
        source_bytes: The raw source bytes.

    Returns:
        The annotated type text, or None when there is no annotation.
    """
    if annotation is None:
        return None

    for child in annotation.children:
        if child.type != ANNOTATION_SEPARATOR:
            return node_text(child, source_bytes).strip()
    return None


def parse_parameter(node: Node, source_bytes: bytes) -> Optional[ParameterRecord]:
    """Extract a single required or optional parameter.

    Args:
        node: A required_parameter or optional_parameter node.
        source_bytes: The raw source bytes.

    Returns:
        A ParameterRecord, or None when the parameter is not a plain
        identifier (destructuring, rest and ``this`` parameters).
    """
    if node.type not in (REQUIRED_PARAMETER, OPTIONAL_PARAMETER):
        return None

    pattern = node.child_by_field_name("pattern")
    if pattern is None or pattern.type not in PARAMETER_NAME_TYPES:
        logger.debug(
            f"Skipping unsupported parameter at line {node.start_point.row + 1}"
        )
        return None

    param_type = annotation_text(node.child_by_field_name("type"), source_bytes)

    default_value = None
    value_node = node.child_by_field_name("value")
    if value_node is not None:
        default_value = node_text(value_node, source_bytes)

    return ParameterRecord(
        name=node_text(pattern, source_bytes),
        type=param_type or DEFAULT_PARAMETER_TYPE,
        is_optional=node.type == OPTIONAL_PARAMETER,
        default_value=default_value,
    )


def parse_parameters(params_node: Node, source_bytes: bytes) -> Tuple[ParameterRecord, ...]:
    """Parse a parameter list into ordered parameter records.

    Punctuation is skipped, as is any child that is not a recognized
    parameter. Order is preserved exactly and names are not de-duplicated.

    Args:
        params_node: A formal_parameters node.
        source_bytes: The raw source bytes.

    Returns:
        Tuple of ParameterRecord in declaration order.
    """
    parameters: List[ParameterRecord] = []

    for child in params_node.children:
        if child.type in PARAMETER_PUNCTUATION:
            continue

        parameter = parse_parameter(child, source_bytes)
        if parameter is not None:
            parameters.append(parameter)

    return tuple(parameters)


def single_parameter(identifier: Node, source_bytes: bytes) -> ParameterRecord:
    """Build the record for an unparenthesized arrow parameter (``x => ...``)."""
    return ParameterRecord(
        name=node_text(identifier, source_bytes),
        type=DEFAULT_PARAMETER_TYPE,
        is_optional=False,
    )
