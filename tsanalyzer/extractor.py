"""
High-level orchestrator for TypeScript function extraction.

This module provides the main entry points for extracting exported function
signatures from source strings, single files, or entire directory trees.
"""

import logging
import os
from contextlib import nullcontext
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Union,
)

from tsanalyzer.config import (
    DECLARATION_FILE_SUFFIXES,
    DEFAULT_DIALECT,
    DEFAULT_EXPORT_ONLY,
    DEFAULT_INCLUDE_DOCUMENTATION,
    DEFAULT_SKIP_DECLARATION_FILES,
    EXCLUDED_DIRS,
    TS_EXTENSIONS,
)
from tsanalyzer.models import FileExtraction, FunctionRecord
from tsanalyzer.parser import (
    ParserUnavailableError,
    count_error_nodes,
    dialect_for_path,
    open_tree,
    read_source,
)
from tsanalyzer.traversal import extract_functions_from_tree

logger = logging.getLogger(__name__)


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.functions_extracted = 0
        self.parse_errors = 0

    def record(self, result: FileExtraction) -> None:
        """Count one successfully processed file."""
        self.files_processed += 1
        self.functions_extracted += len(result.functions)
        self.parse_errors += result.parse_error_count

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "functions_extracted": self.functions_extracted,
            "parse_errors": self.parse_errors,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, functions={self.functions_extracted}, "
            f"parse_errors={self.parse_errors})"
        )


def _to_source_bytes(source: Union[str, bytes]) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, str):
        return source.encode("utf-8")
    raise TypeError(f"Source must be str or bytes, got {type(source).__name__}")


def _is_blank(source: Union[str, bytes, None]) -> bool:
    if source is None:
        return True
    if not isinstance(source, (str, bytes)):
        raise TypeError(f"Source must be str or bytes, got {type(source).__name__}")
    return not source.strip()


def extract_functions(
    source: Union[str, bytes, None],
    export_only: bool = DEFAULT_EXPORT_ONLY,
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION,
    dialect: str = DEFAULT_DIALECT,
) -> List[FunctionRecord]:
    """Extract exported function signatures from TypeScript source text.

    Each call owns its own parser session, released before returning.

    Args:
        source: TypeScript source as str or UTF-8 bytes. None, empty and
            whitespace-only input yield an empty list.
        export_only: Whether only exported declarations are extracted.
        include_documentation: Whether to attach preceding JSDoc comments.
        dialect: "typescript" or "tsx".

    Returns:
        Functions in source order.

    Raises:
        TypeError: If source is neither str, bytes nor None.
        ParserUnavailableError: If the parser cannot be initialized.

    Example:
        >>> [f.name for f in extract_functions("export function add(a: number, b: number): number { return a + b; }")]
        ['add']
    """
    if _is_blank(source):
        return []

    source_bytes = _to_source_bytes(source)
    with open_tree(source_bytes, dialect) as tree:
        return extract_functions_from_tree(
            tree,
            source_bytes,
            export_only=export_only,
            include_documentation=include_documentation,
        )


def extract_names(
    source: Union[str, bytes, None],
    export_only: bool = DEFAULT_EXPORT_ONLY,
    dialect: str = DEFAULT_DIALECT,
) -> List[str]:
    """Extract only the names of exported functions, in source order."""
    functions = extract_functions(
        source,
        export_only=export_only,
        include_documentation=False,
        dialect=dialect,
    )
    return [f.name for f in functions]


def is_typescript_file(
    file_name: str,
    extensions: Iterable[str] = TS_EXTENSIONS,
    skip_declaration_files: bool = DEFAULT_SKIP_DECLARATION_FILES,
) -> bool:
    """Check whether a file name is an extractable TypeScript source."""
    lowered = file_name.lower()
    if skip_declaration_files and lowered.endswith(DECLARATION_FILE_SUFFIXES):
        return False
    return os.path.splitext(lowered)[1] in set(extensions)


def _relative_path(file_path: str, repo_root: Optional[str]) -> str:
    if repo_root is None:
        resolved_repo_root = os.path.dirname(file_path)
    else:
        resolved_repo_root = os.path.abspath(repo_root)

    try:
        return os.path.relpath(file_path, resolved_repo_root)
    except ValueError:
        logger.warning(
            "Cannot compute relative path for %s from %s. Using absolute path.",
            file_path,
            resolved_repo_root,
        )
        return file_path


def extract_file(
    file_path: str,
    repo_root: Optional[str] = None,
    export_only: bool = DEFAULT_EXPORT_ONLY,
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION,
    extensions: Iterable[str] = TS_EXTENSIONS,
) -> FileExtraction:
    """Extract exported functions from a single TypeScript file.

    Args:
        file_path: Absolute or relative path to the .ts/.tsx file.
        repo_root: Root used for the reported relative path. If None, uses
            the file's parent directory.
        export_only: Whether only exported declarations are extracted.
        include_documentation: Whether to attach preceding JSDoc comments.
        extensions: Accepted file extensions.

    Returns:
        A FileExtraction holding the functions and parse error count.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a TypeScript source file.
        ParserUnavailableError: If the parser cannot be initialized.

    Example:
        >>> result = extract_file("src/api.ts", "/path/to/project")
        >>> [f.name for f in result.functions]
        ['fetchUser', 'saveUser']
    """
    file_path = os.path.abspath(file_path)

    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1].lower()
    if ext not in set(extensions):
        raise ValueError(
            f"File {file_path} is not a TypeScript source file. "
            f"Expected one of: {sorted(extensions)}"
        )

    relative_path = _relative_path(file_path, repo_root)
    logger.info("Extracting functions from %s", relative_path)

    source_bytes = read_source(file_path)
    functions: List[FunctionRecord] = []
    parse_error_count = 0

    if not _is_blank(source_bytes):
        with open_tree(source_bytes, dialect_for_path(file_path)) as tree:
            parse_error_count = count_error_nodes(tree)
            if tree.root_node.has_error:
                logger.warning(
                    "File %s contains syntax errors (%d error nodes)",
                    relative_path,
                    parse_error_count,
                )
            functions = extract_functions_from_tree(
                tree,
                source_bytes,
                export_only=export_only,
                include_documentation=include_documentation,
            )

    logger.info("Extracted %d functions from %s", len(functions), relative_path)
    return FileExtraction(
        file_path=relative_path,
        functions=functions,
        parse_error_count=parse_error_count,
    )


def discover_ts_files(
    directory: str,
    extensions: Iterable[str] = TS_EXTENSIONS,
    skip_declaration_files: bool = DEFAULT_SKIP_DECLARATION_FILES,
    exclude_dirs: Iterable[str] = EXCLUDED_DIRS,
) -> List[str]:
    """Recursively discover all TypeScript source files in a directory.

    Args:
        directory: Root directory to search.
        extensions: Accepted file extensions.
        skip_declaration_files: Whether to ignore ``.d.ts`` files.
        exclude_dirs: Directory names that are never descended into.

    Returns:
        Sorted list of absolute paths to TypeScript files.

    Example:
        >>> files = discover_ts_files("/path/to/project")
        >>> len(files)
        42
    """
    ts_files = []
    directory = os.path.abspath(directory)
    extensions = set(extensions)
    excluded = set(exclude_dirs)

    logger.info(f"Discovering TypeScript files in {directory}")

    for root, dirs, files in os.walk(directory):
        # Skip hidden directories and build/dependency output
        dirs[:] = [d for d in dirs if not d.startswith('.') and d not in excluded]

        for file in files:
            if is_typescript_file(file, extensions, skip_declaration_files):
                ts_files.append(os.path.join(root, file))

    logger.info(f"Found {len(ts_files)} TypeScript files")
    return sorted(ts_files)


def iter_extract_directory(
    directory: str,
    repo_root: Optional[str] = None,
    stats: Optional[ExtractionStats] = None,
    continue_on_error: bool = True,
    export_only: bool = DEFAULT_EXPORT_ONLY,
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION,
    extensions: Iterable[str] = TS_EXTENSIONS,
    skip_declaration_files: bool = DEFAULT_SKIP_DECLARATION_FILES,
    exclude_dirs: Iterable[str] = EXCLUDED_DIRS,
    file_scope: Optional[Callable[[str], ContextManager[Any]]] = None,
) -> Iterator[FileExtraction]:
    """Yield per-file extraction results for a directory tree.

    Args:
        directory: Root directory to process.
        repo_root: Root for computing relative paths. If None, uses directory.
        stats: Optional stats object updated as files are processed.
        continue_on_error: If False, re-raise the first per-file failure.
        export_only: Whether only exported declarations are extracted.
        include_documentation: Whether to attach preceding JSDoc comments.
        extensions: Accepted file extensions.
        skip_declaration_files: Whether to ignore ``.d.ts`` files.
        exclude_dirs: Directory names that are never descended into.
        file_scope: Optional factory called with each file's relative path;
            the returned context manager wraps that file's extraction.

    Yields:
        One FileExtraction per successfully processed file.

    Raises:
        FileNotFoundError: If directory does not exist.
        ParserUnavailableError: If the parser cannot be initialized. This is
            never counted as a per-file failure.
    """
    directory = os.path.abspath(directory)

    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    repo_root = directory if repo_root is None else os.path.abspath(repo_root)
    if stats is None:
        stats = ExtractionStats()

    ts_files = discover_ts_files(
        directory,
        extensions=extensions,
        skip_declaration_files=skip_declaration_files,
        exclude_dirs=exclude_dirs,
    )
    if not ts_files:
        logger.warning(f"No TypeScript files found in {directory}")
        return

    logger.info(f"Processing {len(ts_files)} TypeScript files from {directory}")

    for file_path in ts_files:
        scope = file_scope(os.path.relpath(file_path, repo_root)) if file_scope else nullcontext()
        with scope:
            try:
                result = extract_file(
                    file_path,
                    repo_root=repo_root,
                    export_only=export_only,
                    include_documentation=include_documentation,
                    extensions=extensions,
                )
            except ParserUnavailableError:
                raise
            except FileNotFoundError as e:
                logger.error(f"File not found: {e}")
                stats.files_failed += 1
                if not continue_on_error:
                    raise
                continue
            except ValueError as e:
                logger.error(f"Invalid file: {e}")
                stats.files_failed += 1
                if not continue_on_error:
                    raise
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing {file_path}: {e}", exc_info=True)
                stats.files_failed += 1
                if not continue_on_error:
                    raise
                continue

        stats.record(result)
        yield result

    logger.info(f"Extraction complete: {stats}")


def extract_directory(
    directory: str,
    repo_root: Optional[str] = None,
    continue_on_error: bool = True,
    **options: Any,
) -> Tuple[List[FileExtraction], ExtractionStats]:
    """Extract functions from all TypeScript files in a directory tree.

    Args:
        directory: Root directory to process.
        repo_root: Root for computing relative paths. If None, uses directory.
        continue_on_error: If True, continue processing files even if some fail.
        **options: Extraction and discovery options forwarded to
            ``iter_extract_directory``.

    Returns:
        A tuple of (results, stats) where:
        - results: One FileExtraction per processed file, in path order
        - stats: ExtractionStats object with processing statistics

    Raises:
        FileNotFoundError: If directory does not exist.

    Example:
        >>> results, stats = extract_directory("/path/to/project")
        >>> print(f"Extracted {stats.functions_extracted} functions from {stats.files_processed} files")
    """
    stats = ExtractionStats()
    results = list(
        iter_extract_directory(
            directory,
            repo_root=repo_root,
            stats=stats,
            continue_on_error=continue_on_error,
            **options,
        )
    )
    return results, stats


def extract_to_dict_list(
    source: str,
    repo_root: Optional[str] = None,
    **options: Any,
) -> List[Dict[str, Any]]:
    """Extract functions and return per-file dictionaries.

    This is a convenience function that automatically detects whether
    the source is a file or directory and returns results in dict format
    ready for JSON serialization.

    Args:
        source: Path to a file or directory.
        repo_root: Root for computing relative paths.
        **options: Extraction options (export_only, include_documentation, ...).

    Returns:
        List of per-file dictionaries.

    Raises:
        FileNotFoundError: If the source path does not exist.

    Example:
        >>> results = extract_to_dict_list("src/")
        >>> import json
        >>> json.dump(results, open("functions.json", "w"), indent=2)
    """
    source = os.path.abspath(source)

    if os.path.isfile(source):
        file_options = {
            k: v for k, v in options.items()
            if k in ("export_only", "include_documentation", "extensions")
        }
        results = [extract_file(source, repo_root, **file_options)]
    elif os.path.isdir(source):
        results, stats = extract_directory(source, repo_root, **options)
        logger.info(f"Extraction stats: {stats}")
    else:
        raise FileNotFoundError(f"Source not found: {source}")

    return [result.to_dict() for result in results]
