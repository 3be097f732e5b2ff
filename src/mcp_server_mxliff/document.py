"""
MXLIFF document context.

Owns the parsed tree for one processing pass together with the values every
unit needs: the namespace locator, the workflow level and the user directory.
"""

from pathlib import Path
from typing import Dict, Optional, Any
import logging

from lxml import etree

from .constants import DEFAULT_WORKFLOW_LEVEL, MAX_FILE_SIZE
from .locator import NodeLocator
from .users import UserDirectory

logger = logging.getLogger("mxliff-parser")

UTF8_BOM = b'\xef\xbb\xbf'


class MXLIFFDocument:
    """Parsed MXLIFF file plus its document-wide settings."""

    # Maximum file size (50MB) - MXLIFF files are typically much smaller
    MAX_FILE_SIZE = MAX_FILE_SIZE

    def __init__(self, file_path: str):
        """
        Load and parse an MXLIFF file.

        Args:
            file_path: Path to the MXLIFF file

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is too large or m:level is not an integer
            lxml.etree.XMLSyntaxError: If the file is not well-formed XML
        """
        self.file_path = Path(file_path)
        self.tree: Optional[etree._ElementTree] = None
        self.root: Optional[etree._Element] = None
        self.locator = NodeLocator()
        self.has_bom = False
        self._load_file()
        self.workflow_level = self._read_workflow_level()
        self.users = UserDirectory.from_document(self.root, self.locator)

    def _load_file(self):
        """Load and parse the MXLIFF file."""
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {self.file_path}")

        # Check file size to prevent memory exhaustion
        file_size = self.file_path.stat().st_size
        if file_size > self.MAX_FILE_SIZE:
            raise ValueError(
                f"File too large: {file_size / (1024*1024):.1f}MB "
                f"(max: {self.MAX_FILE_SIZE / (1024*1024):.0f}MB)"
            )

        with open(self.file_path, 'rb') as f:
            self.has_bom = f.read(3) == UTF8_BOM

        # Secure XML parser configuration
        parser = etree.XMLParser(
            remove_blank_text=False,
            strip_cdata=False,
            resolve_entities=False,  # Prevent XXE attacks
            no_network=True,         # Block external network access
            huge_tree=False,         # Prevent billion laughs / memory exhaustion
        )
        self.tree = etree.parse(str(self.file_path), parser)
        self.root = self.tree.getroot()

    def _read_workflow_level(self) -> int:
        level = self.locator.attr(self.root, 'm:level')
        if level is None:
            return DEFAULT_WORKFLOW_LEVEL
        try:
            return int(level)
        except ValueError:
            raise ValueError(f"Invalid m:level value: '{level}'") from None

    def get_file_metadata(self) -> Dict[str, Any]:
        """
        Extract file-level metadata.

        Returns:
            Dictionary with metadata:
            - source_language: Source language code (e.g., 'en')
            - target_language: Target language code (e.g., 'de')
            - workflow_level: Number of workflow stages (0 if not declared)
            - users: Number of entries in the user listing
        """
        metadata: Dict[str, Any] = {
            'source_language': None,
            'target_language': None,
            'workflow_level': self.workflow_level,
            'users': len(self.users),
        }

        file_elem = self.locator.find(self.root, './/x:file')
        if file_elem is not None:
            metadata['source_language'] = file_elem.get('source-language')
            metadata['target_language'] = file_elem.get('target-language')

        return metadata

    def save(self, output_path: Optional[str] = None):
        """
        Save the document.

        Preserves original file characteristics:
        - UTF-8 BOM if present in original
        - Original XML declaration format
        - Minimal structure changes

        Args:
            output_path: Optional output path. If None, overwrites the original file.
        """
        if output_path is None:
            output_path = str(self.file_path)

        xml_content = etree.tostring(
            self.root,
            encoding='unicode',
            pretty_print=False,
        )

        with open(output_path, 'wb') as f:
            if self.has_bom:
                f.write(UTF8_BOM)
            f.write(b'<?xml version="1.0" encoding="utf-8"?>')
            f.write(xml_content.encode('utf-8'))

        logger.info(f"Saved {self.file_path.name} to {output_path}")
