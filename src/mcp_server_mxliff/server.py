"""
MCP Server for MXLIFF File Operations

This server exposes tools for reading, analyzing, and modifying MXLIFF files
through the Model Context Protocol (MCP).
"""

import asyncio
import json
import os
import sys
import tempfile
import traceback
from collections import Counter
from pathlib import Path
from typing import Any, List, Optional

from mcp.server import Server
from mcp.types import Tool, TextContent, Resource
from mcp.server.stdio import stdio_server
import logging

from .cache import clear_cache, get_document, validate_file_extension
from .constants import MAX_SEGMENT_TEXT_SIZE
from .models import ConfirmationLevel, Segment
from .parser import MXLIFFParser
from .tags import TagAllocationState
from .tokenizer import tokenize_text
from .writer import MXLIFFWriter


# Set up logging - try multiple locations for sandbox compatibility
def setup_logging():
    """Set up logging to stderr and the first writable log file."""
    log_locations = [
        Path.home() / "mxliff_debug.log",  # User home
        Path(tempfile.gettempdir()) / "mxliff_mcp_server.log",  # Temp dir
    ]

    handlers = [logging.StreamHandler(sys.stderr)]  # Always log to stderr

    for log_path in log_locations:
        try:
            handler = logging.FileHandler(str(log_path), mode='a')
            handlers.append(handler)
            break  # Use first writable location
        except (PermissionError, OSError):
            continue

    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    return logging.getLogger("mxliff-server")


logger = logging.getLogger("mxliff-server")

# Create the MCP server instance
app = Server("mxliff-server")

_FILE_PATH_SCHEMA = {
    "type": "string",
    "description": "Path to the MXLIFF file (can be relative or absolute)",
}


def _inline_codes(segment: Segment) -> Counter:
    return Counter(p.content for p in segment.placeholders() if not p.from_element)


def tag_warnings(source: Segment, target: Segment) -> List[str]:
    """Compare the inline codes of a new target with those of the source."""
    warnings = []
    source_codes = _inline_codes(source)
    target_codes = _inline_codes(target)

    missing = source_codes - target_codes
    if missing:
        warnings.append(f"Missing inline codes: {' '.join(sorted(missing.elements()))}")
    extra = target_codes - source_codes
    if extra:
        warnings.append(f"Inline codes not in source: {' '.join(sorted(extra.elements()))}")
    return warnings


def update_unit(
    file_path: str,
    unit_id: str,
    target_text: str,
    status: Optional[str] = None
) -> dict:
    """
    Replace a unit's target text in the cached document.

    Args:
        file_path: Path to the MXLIFF file
        unit_id: trans-unit id
        target_text: New target text; inline codes are kept as placeholders
        status: Optional confirmation level name, e.g. 'Translated'

    Returns:
        Dictionary with success, message and warnings
    """
    result = {'success': False, 'message': '', 'warnings': []}

    if len(target_text) > MAX_SEGMENT_TEXT_SIZE:
        result['message'] = (
            f"Target text too large: {len(target_text)} characters "
            f"(max: {MAX_SEGMENT_TEXT_SIZE})"
        )
        return result

    level = None
    if status is not None:
        try:
            level = ConfirmationLevel(status)
        except ValueError:
            valid = ", ".join(c.value for c in ConfirmationLevel)
            result['message'] = f"Invalid status '{status}'. Valid values: {valid}"
            return result

    document = get_document(file_path)
    unit = MXLIFFParser(document=document).get_unit_by_id(unit_id)
    if unit is None:
        result['message'] = f"Unit '{unit_id}' not found"
        return result

    target = Segment(
        runs=list(tokenize_text(target_text, TagAllocationState(), is_source=False)),
        locked=unit.target.locked,
    )
    result['warnings'] = tag_warnings(unit.source, target)
    for warning in result['warnings']:
        logger.warning(f"Unit {unit_id}: {warning}")

    unit.target = target
    if level is not None:
        unit.confirmation_level = level

    MXLIFFWriter(document=document).merge_unit(unit)

    result['success'] = True
    result['message'] = f"Successfully updated unit '{unit_id}'"
    return result


def _text(payload: Any) -> List[TextContent]:
    if not isinstance(payload, str):
        payload = json.dumps(payload, indent=2, ensure_ascii=False)
    return [TextContent(type="text", text=payload)]


@app.list_resources()
async def list_resources() -> list[Resource]:
    """File discovery is left to the client's filesystem tools."""
    return []


@app.read_resource()
async def read_resource(uri: str) -> str:
    """Read a resource by URI."""
    logger.info(f"read_resource called with URI: {uri}")

    if uri.startswith("mxliff:///"):
        file_path = uri.replace("mxliff:///", "")
        units = MXLIFFParser(document=get_document(file_path)).parse()
        return json.dumps({
            "file": file_path,
            "units": [unit.to_dict() for unit in units],
        }, indent=2, ensure_ascii=False)

    raise ValueError(f"Unknown resource URI: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MXLIFF tools."""
    return [
        Tool(
            name="read_mxliff",
            description=(
                "Extract all translation units from an MXLIFF (Memsource/Phrase) file. "
                "Returns unit IDs, source text, target text, confirmation status, locked "
                "state, match percentage, origin and comments. Inline codes such as {1} "
                "or <b> are kept in the text."
            ),
            inputSchema={
                "type": "object",
                "properties": {"file_path": _FILE_PATH_SCHEMA},
                "required": ["file_path"],
            },
        ),
        Tool(
            name="get_mxliff_unit",
            description="Get a single translation unit from an MXLIFF file by its trans-unit ID.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": _FILE_PATH_SCHEMA,
                    "unit_id": {
                        "type": "string",
                        "description": "The trans-unit ID to retrieve",
                    },
                },
                "required": ["file_path", "unit_id"],
            },
        ),
        Tool(
            name="update_mxliff_unit",
            description=(
                "Update a unit's target text, optionally setting its confirmation status. "
                "Keep every inline code of the source (e.g. {1}, <b>) in the new text. "
                "Changes are made in memory; call save_mxliff to persist them."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": _FILE_PATH_SCHEMA,
                    "unit_id": {
                        "type": "string",
                        "description": "The trans-unit ID to update",
                    },
                    "target_text": {
                        "type": "string",
                        "description": "New target text for the unit",
                    },
                    "status": {
                        "type": "string",
                        "description": "Optional confirmation level",
                        "enum": [level.value for level in ConfirmationLevel],
                    },
                },
                "required": ["file_path", "unit_id", "target_text"],
            },
        ),
        Tool(
            name="save_mxliff",
            description=(
                "Save changes made to an MXLIFF file. All modifications from "
                "update_mxliff_unit are kept in memory until this tool is called."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": _FILE_PATH_SCHEMA,
                    "output_path": {
                        "type": "string",
                        "description": "Optional output path. If not provided, overwrites the original file.",
                    },
                },
                "required": ["file_path"],
            },
        ),
        Tool(
            name="get_mxliff_statistics",
            description=(
                "Get statistics and metadata about an MXLIFF file: languages, workflow "
                "level, unit count, counts by confirmation status, locked and commented "
                "units, and average match percentage."
            ),
            inputSchema={
                "type": "object",
                "properties": {"file_path": _FILE_PATH_SCHEMA},
                "required": ["file_path"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""

    logger.info(f"call_tool: {name} with arguments: {arguments}")

    try:
        if name == "read_mxliff":
            parser = MXLIFFParser(document=get_document(arguments["file_path"]))
            units = parser.parse()
            logger.info(f"Extracted {len(units)} units")
            return _text([unit.to_dict() for unit in units])

        elif name == "get_mxliff_unit":
            unit_id = arguments["unit_id"]
            parser = MXLIFFParser(document=get_document(arguments["file_path"]))
            unit = parser.get_unit_by_id(unit_id)
            if unit is None:
                return _text(f"Unit with ID '{unit_id}' not found.")
            return _text(unit.to_dict())

        elif name == "update_mxliff_unit":
            result = update_unit(
                arguments["file_path"],
                arguments["unit_id"],
                arguments["target_text"],
                arguments.get("status"),
            )
            if result['success']:
                result['message'] += ". Remember to call save_mxliff to persist changes."
            return _text(result)

        elif name == "save_mxliff":
            file_path = arguments["file_path"]
            output_path = arguments.get("output_path")

            # Validate output_path extension if provided
            if output_path:
                validate_file_extension(output_path)

            document = get_document(file_path)
            document.save(output_path)
            clear_cache(str(document.file_path))

            return _text(f"Successfully saved MXLIFF file to: {output_path or file_path}")

        elif name == "get_mxliff_statistics":
            parser = MXLIFFParser(document=get_document(arguments["file_path"]))
            return _text(parser.get_statistics())

        else:
            return _text(f"Unknown tool: {name}")

    except FileNotFoundError as e:
        file_path = arguments.get("file_path", "unknown")
        return _text(f"File not found.\nRequested: {file_path}\nCWD: {os.getcwd()}\nError: {str(e)}")
    except Exception as e:
        # Provide detailed error for debugging
        error_details = traceback.format_exc()
        return _text(f"Error: {str(e)}\n\nDetails:\n{error_details}")


async def main():
    """Run the MCP server."""
    setup_logging()
    logger.info("=== MCP Server Starting ===")
    logger.info(f"CWD: {os.getcwd()}")
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )


if __name__ == "__main__":
    asyncio.run(main())
