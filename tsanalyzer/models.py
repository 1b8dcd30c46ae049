"""
Data models for extracted TypeScript function signatures.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple


@dataclass(frozen=True)
class ParameterRecord:
    """One formal parameter of an exported function.

    Attributes:
        name: Bound identifier.
        type: Raw type annotation text, "any" when unannotated.
        is_optional: Whether the parameter is marked with ``?``.
        default_value: Raw text of the default-value expression, or None.
    """

    name: str
    type: str = "any"
    is_optional: bool = False
    default_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the parameter to its wire representation.

        Returns:
            Dictionary with ``name``, ``type``, ``isOptional`` and ``defaultValue``.
        """
        return {
            "name": self.name,
            "type": self.type,
            "isOptional": self.is_optional,
            "defaultValue": self.default_value,
        }


@dataclass(frozen=True)
class FunctionRecord:
    """Structural description of one exported callable.

    Records are immutable and compare by value, so two extractions of the
    same source produce equal sequences.

    Attributes:
        name: Function name; never empty.
        parameters: Parameters in declaration order.
        return_type: Raw return type text (defaults depend on the shape).
        is_async: Whether the declaration carries an ``async`` marker.
        documentation: Cleaned JSDoc text, or None.
    """

    name: str
    parameters: Tuple[ParameterRecord, ...] = ()
    return_type: str = "void"
    is_async: bool = False
    documentation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the function to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary using the stable field names consumed by code generators.
        """
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type,
            "isAsync": self.is_async,
            "documentation": self.documentation,
        }


@dataclass
class FileExtraction:
    """Functions extracted from a single source file."""

    file_path: str
    functions: List[FunctionRecord] = field(default_factory=list)
    parse_error_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file_path,
            "functions": [f.to_dict() for f in self.functions],
            "parse_error_count": self.parse_error_count,
        }
