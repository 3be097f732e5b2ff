"""
Content handler interface.

The parser drives a handler per document, in this order:
initialize, set_file_properties, process_paragraph_unit (once per unit),
file_complete, complete. MXLIFFWriter implements the same interface, so a
parse can feed a writer directly.
"""

from typing import Any, Dict, List, Optional

from .models import FileProperties, ParagraphUnit


class ContentHandler:
    """Base handler; every hook is a no-op."""

    def initialize(self, document_properties: Optional[Dict[str, Any]] = None) -> None:
        pass

    def set_file_properties(self, properties: FileProperties) -> None:
        pass

    def process_paragraph_unit(self, unit: ParagraphUnit) -> None:
        pass

    def file_complete(self) -> None:
        pass

    def complete(self) -> None:
        pass


class CollectingHandler(ContentHandler):
    """Keeps every unit and the order in which hooks were called."""

    def __init__(self):
        self.units: List[ParagraphUnit] = []
        self.calls: List[str] = []
        self.file_properties: Optional[FileProperties] = None

    def initialize(self, document_properties=None):
        self.calls.append('initialize')

    def set_file_properties(self, properties):
        self.calls.append('set_file_properties')
        self.file_properties = properties

    def process_paragraph_unit(self, unit):
        self.calls.append('process_paragraph_unit')
        self.units.append(unit)

    def file_complete(self):
        self.calls.append('file_complete')

    def complete(self):
        self.calls.append('complete')
