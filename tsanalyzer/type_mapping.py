"""
TypeScript type text to target type normalization.

Extraction keeps raw type text; code generators call ``normalize_type`` when
emitting proxies. The mapping is total: anything unrecognized (generic
instantiations, unions, custom names) becomes ``TargetType.DYNAMIC``.
"""

from enum import Enum
from typing import Any, Dict, Optional

from tsanalyzer.models import FunctionRecord


class TargetType(str, Enum):
    """Closed vocabulary of generator-side types."""

    STRING = "string"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    VOID = "void"
    DYNAMIC = "dynamic"


TYPE_MAP: Dict[str, TargetType] = {
    "string": TargetType.STRING,
    "number": TargetType.DOUBLE,
    "boolean": TargetType.BOOLEAN,
    "void": TargetType.VOID,
    "any": TargetType.DYNAMIC,
}


def normalize_type(type_text: Optional[str]) -> TargetType:
    """Map raw TypeScript type text to a target type.

    Matching is exact; ``"Promise<string>"`` or ``"string | null"`` map to
    DYNAMIC.
    """
    if type_text is None:
        return TargetType.DYNAMIC
    return TYPE_MAP.get(type_text, TargetType.DYNAMIC)


def target_signature(function: FunctionRecord) -> Dict[str, Any]:
    """Describe a function's normalized signature for a code generator.

    Args:
        function: An extracted function record.

    Returns:
        Dictionary with ``returnType`` and per-parameter ``type`` normalized.
    """
    return {
        "name": function.name,
        "returnType": normalize_type(function.return_type).value,
        "parameters": [
            {
                "name": p.name,
                "type": normalize_type(p.type).value,
                "isOptional": p.is_optional,
            }
            for p in function.parameters
        ],
    }
