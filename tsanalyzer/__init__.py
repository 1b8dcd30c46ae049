"""
TypeScript Analyzer

Tree-sitter-based TypeScript parser and exported-function signature extractor.
Extracts function names, typed parameters, return types, async flags and
JSDoc comments for downstream proxy generation.
"""

from tsanalyzer.models import FileExtraction, FunctionRecord, ParameterRecord
from tsanalyzer.parser import (
    ParserUnavailableError,
    count_error_nodes,
    create_parser,
    open_tree,
    parse_bytes,
    parse_file,
)
from tsanalyzer.parameters import parse_parameters
from tsanalyzer.shapes import Shape, extract_shape
from tsanalyzer.traversal import extract_functions_from_tree, walk
from tsanalyzer.type_mapping import TargetType, normalize_type, target_signature
from tsanalyzer.extractor import (
    ExtractionStats,
    discover_ts_files,
    extract_directory,
    extract_file,
    extract_functions,
    extract_names,
    extract_to_dict_list,
    iter_extract_directory,
)

__all__ = [
    # Data models
    "FunctionRecord",
    "ParameterRecord",
    "FileExtraction",
    "ExtractionStats",
    # Low-level parsing
    "ParserUnavailableError",
    "create_parser",
    "open_tree",
    "parse_bytes",
    "parse_file",
    "count_error_nodes",
    # Mid-level extraction
    "Shape",
    "extract_shape",
    "parse_parameters",
    "walk",
    "extract_functions_from_tree",
    # Type normalization
    "TargetType",
    "normalize_type",
    "target_signature",
    # High-level orchestration
    "extract_functions",
    "extract_names",
    "extract_file",
    "extract_directory",
    "iter_extract_directory",
    "extract_to_dict_list",
    "discover_ts_files",
]
