"""
Constants and configuration values for the MXLIFF MCP server.

Centralizes all magic numbers and configuration constants.
"""

import re
from pathlib import Path

# File size limits
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB - MXLIFF files are typically much smaller
MAX_SEGMENT_TEXT_SIZE = 100 * 1024  # 100KB - segments are typically much smaller

# Allowed file extensions
ALLOWED_EXTENSIONS = frozenset({'.mxliff', '.mxlf'})

# Cache configuration
CACHE_MAX_SIZE = 10  # Maximum number of cached parsers

# Environment variable holding extra search directories
SEARCH_DIRS_ENV = "MXLIFF_SEARCH_DIRS"


# Default search directories for file discovery (Claude Desktop mode)
def get_default_search_directories() -> list[Path]:
    """Get default directories to search for MXLIFF files."""
    home = Path.home()
    candidates = [
        home / "Documents",
        home / "Downloads",
        home / "Desktop",
        home / "Translations",  # Common folder for translators
    ]
    # Only return directories that exist
    return [d for d in candidates if d.exists() and d.is_dir()]


# XML namespaces, resolved by URI. The prefixes are only our own lookup keys.
XLIFF_NS = 'urn:oasis:names:tc:xliff:document:1.2'
MXLF_NS = 'http://www.memsource.com/mxlf/2.0'

DEFAULT_NAMESPACES = {
    'x': XLIFF_NS,
    'm': MXLF_NS,
}

# Workflow level used when the root carries no m:level
DEFAULT_WORKFLOW_LEVEL = 0

# Inline codes such as {1}, <b>, {ab> inside segment text
INLINE_CODE_PATTERN = re.compile(r'((?:\{|<)[a-z0-9]{1,2}(?:>|\}))')

# Translation origin codes
ORIGIN_MACHINE_TRANSLATION = 'mt'
ORIGIN_TRANSLATION_MEMORY = 'tm'

# m:trans-origin value meaning "no origin"
NULL_TRANS_ORIGIN = 'null'
