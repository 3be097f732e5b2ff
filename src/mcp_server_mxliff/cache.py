"""
Path resolution and document cache for the MCP server.

Documents are cached per resolved path. Edits merged into a cached document
stay in memory until the document is saved.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import logging
import os

from .constants import (
    ALLOWED_EXTENSIONS,
    CACHE_MAX_SIZE,
    SEARCH_DIRS_ENV,
    get_default_search_directories,
)
from .document import MXLIFFDocument

logger = logging.getLogger("mxliff-server")


@dataclass
class CachedDocument:
    """Cache entry for a document with modification time tracking."""
    document: MXLIFFDocument
    mtime: float


# LRU-style cache with size limit and mtime validation
_document_cache: dict[str, CachedDocument] = {}

# Directories searched when a path does not exist as given
_search_directories: list[Path] = []


def set_search_directories(directories: list[Path]) -> None:
    """Replace the directories used to resolve bare or sandbox paths."""
    _search_directories[:] = list(directories)
    logger.info(f"Search directories: {[str(d) for d in _search_directories]}")


def existing_directories(paths: Iterable[str]) -> list[Path]:
    """Expand and resolve paths, keeping only directories that exist."""
    directories = []
    for raw in paths:
        raw = raw.strip()
        if not raw:
            continue
        path = Path(raw).expanduser().resolve()
        if path.is_dir():
            directories.append(path)
        else:
            logger.warning(f"Ignoring search directory '{raw}': not a directory")
    return directories


def get_search_directories() -> list[Path]:
    """
    Directories searched for MXLIFF files, first non-empty source wins:
    set_search_directories (the -d flags), then MXLIFF_SEARCH_DIRS
    (os.pathsep separated), then the default user folders.
    """
    if _search_directories:
        return list(_search_directories)
    from_env = existing_directories(os.environ.get(SEARCH_DIRS_ENV, "").split(os.pathsep))
    return from_env or get_default_search_directories()


def validate_file_extension(file_path: str) -> None:
    """
    Validate that the file has an allowed extension.

    Args:
        file_path: The file path to validate

    Raises:
        ValueError: If the file extension is not allowed
    """
    suffix = Path(file_path).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise ValueError(
            f"Invalid file type: '{suffix}'. "
            f"This tool only supports MXLIFF files ({', '.join(sorted(ALLOWED_EXTENSIONS))})"
        )


def resolve_file_path(file_path: str) -> Path:
    """
    Resolve a file path, falling back to the search directories.

    Args:
        file_path: Absolute, relative, or sandbox path

    Returns:
        Resolved Path object

    Raises:
        FileNotFoundError: If the file cannot be found in any location
        ValueError: If the file extension is not allowed
    """
    validate_file_extension(file_path)

    path = Path(file_path)
    try:
        if path.exists() and path.is_file():
            return path.resolve()
    except (OSError, ValueError) as e:
        logger.debug(f"Direct path check failed: {e}")

    filename = path.name
    parent_name = path.parent.name if path.parent.name and path.parent.name != "mnt" else None

    for root in get_search_directories():
        if not root.exists():
            continue
        candidates = [root / filename]
        if parent_name:
            candidates.insert(0, root / parent_name / filename)
        for candidate in candidates:
            if candidate.exists() and candidate.is_file():
                logger.info(f"Resolved {file_path} -> {candidate}")
                return candidate.resolve()

    raise FileNotFoundError(f"File not found: {file_path}\nSearched for: {filename}")


def get_document(file_path: str) -> MXLIFFDocument:
    """
    Get or load the document for the given file.

    Uses LRU-style caching with modification time validation to ensure
    fresh data and bounded memory usage.
    """
    path = resolve_file_path(file_path)
    normalized_path = str(path)
    current_mtime = path.stat().st_mtime

    if normalized_path in _document_cache:
        cached = _document_cache[normalized_path]
        if cached.mtime == current_mtime:
            # Move to end for LRU behavior (most recently used)
            _document_cache.pop(normalized_path)
            _document_cache[normalized_path] = cached
            return cached.document
        logger.debug(f"Cache invalidated for {normalized_path} (file modified)")
        _document_cache.pop(normalized_path)

    # Evict oldest entry if cache is full
    if len(_document_cache) >= CACHE_MAX_SIZE:
        oldest_key = next(iter(_document_cache))
        logger.debug(f"Evicting oldest cache entry: {oldest_key}")
        _document_cache.pop(oldest_key)

    document = MXLIFFDocument(normalized_path)
    _document_cache[normalized_path] = CachedDocument(document=document, mtime=current_mtime)
    return document


def clear_cache(file_path: Optional[str] = None):
    """
    Clear cached documents for a specific file or all files.

    Args:
        file_path: Optional specific file path. If None, clears all cache.
    """
    if file_path:
        _document_cache.pop(str(Path(file_path).resolve()), None)
    else:
        _document_cache.clear()
