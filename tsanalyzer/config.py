"""
Configuration constants for TypeScript function extraction.

Defines the tree-sitter node type strings used for export-shape recognition.
"""

from typing import Set

# Export wrapper node type
EXPORT_STATEMENT: str = "export_statement"

# Root node type
PROGRAM_NODE: str = "program"

# Named function declaration (also used for `export default function f`)
FUNCTION_DECLARATION: str = "function_declaration"

# Function expression node types (`function` in older grammar releases)
FUNCTION_EXPRESSION_TYPES: Set[str] = {
    "function_expression",
    "function",
}

ARROW_FUNCTION: str = "arrow_function"

# const/let and var declarations
VARIABLE_CONTAINER_TYPES: Set[str] = {
    "lexical_declaration",
    "variable_declaration",
}

VARIABLE_DECLARATOR: str = "variable_declarator"

# Keyword tokens
ASYNC_MARKER: str = "async"
DEFAULT_MARKER: str = "default"
DECORATOR_NODE: str = "decorator"

# Parameter list handling
PARAMETER_PUNCTUATION: Set[str] = {"(", ")", ","}
REQUIRED_PARAMETER: str = "required_parameter"
OPTIONAL_PARAMETER: str = "optional_parameter"
PARAMETER_NAME_TYPES: Set[str] = {"identifier"}
ANNOTATION_SEPARATOR: str = ":"

# Name node types accepted for functions and declarators
IDENTIFIER_TYPES: Set[str] = {"identifier"}

# Comment node type (includes //, /* */, /** */)
COMMENT_NODE: str = "comment"

# JSDoc comment prefix
JSDOC_PREFIX: str = "/**"

# Type text defaults
DEFAULT_PARAMETER_TYPE: str = "any"
DEFAULT_DECLARATION_RETURN_TYPE: str = "void"
DEFAULT_ARROW_RETURN_TYPE: str = "any"

# Grammar dialects
DIALECT_TYPESCRIPT: str = "typescript"
DIALECT_TSX: str = "tsx"
DEFAULT_DIALECT: str = DIALECT_TYPESCRIPT

# TypeScript file extensions
TS_EXTENSIONS: Set[str] = {
    ".ts",
    ".tsx",
    ".mts",
    ".cts",
}

TSX_EXTENSIONS: Set[str] = {".tsx"}

# Ambient declaration files carry no implementations
DECLARATION_FILE_SUFFIXES: tuple = (
    ".d.ts",
    ".d.mts",
    ".d.cts",
)

# Directories never scanned during discovery
EXCLUDED_DIRS: Set[str] = {
    "node_modules",
    "dist",
    "build",
    "out",
    "coverage",
    "bin",
    "obj",
    "__pycache__",
}

# Extraction policy defaults
DEFAULT_EXPORT_ONLY: bool = True
DEFAULT_INCLUDE_DOCUMENTATION: bool = True
DEFAULT_SKIP_DECLARATION_FILES: bool = True
