"""
Tree-sitter parser initialization and TypeScript parsing utilities.

This module provides functions to initialize the TypeScript/TSX parsers,
parse source text, and scope a parser to a single extraction session.
"""

import codecs
import logging
import os
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from tsanalyzer.config import (
    DEFAULT_DIALECT,
    DIALECT_TSX,
    DIALECT_TYPESCRIPT,
    TSX_EXTENSIONS,
)

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constants
TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

LANGUAGES: Dict[str, Language] = {
    DIALECT_TYPESCRIPT: TS_LANGUAGE,
    DIALECT_TSX: TSX_LANGUAGE,
}


class ParserUnavailableError(RuntimeError):
    """Raised when a tree-sitter parser cannot be initialized."""


def dialect_for_path(file_path: str) -> str:
    """Pick the grammar dialect for a file based on its extension.

    Args:
        file_path: Path of the TypeScript source file.

    Returns:
        "tsx" for .tsx files, "typescript" otherwise.
    """
    ext = os.path.splitext(file_path)[1].lower()
    return DIALECT_TSX if ext in TSX_EXTENSIONS else DIALECT_TYPESCRIPT


def create_parser(dialect: str = DEFAULT_DIALECT) -> Parser:
    """Create and configure a tree-sitter parser for TypeScript.

    Args:
        dialect: Either "typescript" or "tsx".

    Returns:
        A Parser instance configured with the requested grammar.

    Raises:
        ValueError: If the dialect is unknown.
        ParserUnavailableError: If the parser cannot be constructed.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"export function f(): void {}")
    """
    language = LANGUAGES.get(dialect)
    if language is None:
        raise ValueError(
            f"Unknown dialect {dialect!r}. Expected one of: {sorted(LANGUAGES)}"
        )

    try:
        parser = Parser(language)
    except Exception as e:
        logger.error("Failed to initialize %s parser: %s", dialect, e)
        raise ParserUnavailableError(
            f"Could not initialize tree-sitter {dialect} parser: {e}"
        ) from e

    logger.debug(f"Created tree-sitter {dialect} parser")
    return parser


def parse_bytes(source: bytes, dialect: str = DEFAULT_DIALECT) -> Tree:
    """Parse raw bytes of TypeScript source code.

    Args:
        source: UTF-8 encoded bytes of TypeScript source code.
        dialect: Grammar dialect to parse with.

    Returns:
        A Tree object representing the parsed syntax tree.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"export function foo() {}")
        >>> tree.root_node.type
        'program'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser(dialect)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug(f"Parsed {len(source)} bytes of {dialect} code")
    return tree


@contextmanager
def open_tree(source: bytes, dialect: str = DEFAULT_DIALECT) -> Iterator[Tree]:
    """Parse source inside a scoped parser session.

    The parser is owned by this session only. It is reset when the block
    exits, whether normally or through an exception raised by the caller
    while walking the tree.

    Args:
        source: UTF-8 encoded bytes of TypeScript source code.
        dialect: Grammar dialect to parse with.

    Yields:
        The parsed Tree.

    Raises:
        TypeError: If source is not bytes.
        ParserUnavailableError: If the parser cannot be constructed.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser(dialect)
    try:
        tree = parser.parse(source)
        if tree.root_node.has_error:
            logger.debug("Parsed tree contains syntax errors")
        yield tree
    finally:
        parser.reset()
        logger.debug("Released %s parser session", dialect)


def read_source(file_path: str) -> bytes:
    """Read a source file as bytes, dropping a leading UTF-8 BOM.

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except IOError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    if source_bytes.startswith(codecs.BOM_UTF8):
        source_bytes = source_bytes[len(codecs.BOM_UTF8):]
    return source_bytes


def parse_file(file_path: str, dialect: Optional[str] = None) -> Tuple[Tree, bytes]:
    """Parse a TypeScript source file from disk.

    Args:
        file_path: Path to the .ts or .tsx file.
        dialect: Grammar dialect; chosen from the extension when None.

    Returns:
        A tuple of (Tree, source_bytes) where:
        - Tree is the parsed syntax tree
        - source_bytes is the file content without a BOM

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.

    Example:
        >>> tree, source = parse_file("api.ts")
        >>> tree.root_node.type
        'program'
    """
    source_bytes = read_source(file_path)
    tree = parse_bytes(source_bytes, dialect or dialect_for_path(file_path))

    logger.info(f"Successfully parsed file: {file_path}")
    return tree, source_bytes


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and missing nodes in a parsed tree.

    Args:
        tree: The parsed tree.

    Returns:
        Number of nodes produced by grammar error recovery.
    """
    count = 0
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


def node_text(node: Node, source_bytes: bytes) -> str:
    """Recover the exact source text spanned by a node."""
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
