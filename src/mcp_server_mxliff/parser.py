"""
MXLIFF Parser Module

Reads MXLIFF files into paragraph units.
MXLIFF is the XLIFF 1.2 dialect exported by Memsource (Phrase TMS), extended
with the http://www.memsource.com/mxlf/2.0 namespace.
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from lxml import etree

from .comments import build_comment
from .document import MXLIFFDocument
from .handlers import ContentHandler
from .models import (
    FileProperties,
    ParagraphUnit,
    Segment,
    TranslationOrigin,
)
from .resolvers import (
    classify_origin,
    resolve_confirmation_level,
    resolve_match_percent,
    resolve_trans_origin,
)
from .tags import TagAllocationState
from .tokenizer import build_segment, tokenize_node

logger = logging.getLogger("mxliff-parser")

ProgressCallback = Callable[[int], None]


class MXLIFFParser:
    """Parser for MXLIFF files."""

    def __init__(self, file_path: Optional[str] = None, document: Optional[MXLIFFDocument] = None):
        """
        Initialize the parser with a file path or an already loaded document.

        Args:
            file_path: Path to the MXLIFF file
            document: Loaded document to read instead of file_path
        """
        if document is None:
            if file_path is None:
                raise ValueError("Either file_path or document is required")
            document = MXLIFFDocument(file_path)
        self.document = document
        self.locator = document.locator

    @property
    def root(self) -> etree._Element:
        return self.document.root

    @property
    def workflow_level(self) -> int:
        return self.document.workflow_level

    @property
    def users(self):
        return self.document.users

    def _unit_containers(self) -> List[etree._Element]:
        # Every translatable unit is wrapped in its own group
        return self.locator.findall(self.root, './/x:group')

    def _file_properties(self) -> FileProperties:
        metadata = self.document.get_file_metadata()
        return FileProperties(
            original_file_path=str(self.document.file_path),
            source_language=metadata['source_language'],
            target_language=metadata['target_language'],
            workflow_level=self.workflow_level,
        )

    def parse(
        self,
        handler: Optional[ContentHandler] = None,
        progress: Optional[ProgressCallback] = None
    ) -> List[ParagraphUnit]:
        """
        Convert every unit of the document, in document order.

        Args:
            handler: Receives the units through the host hooks
            progress: Called with 0, then the rounded percentage after each
                unit, then 100

        Returns:
            The paragraph units
        """
        handler = handler or ContentHandler()

        def report(percent: int):
            if progress is not None:
                progress(percent)

        report(0)
        handler.initialize({'workflow_level': self.workflow_level})
        handler.set_file_properties(self._file_properties())

        state = TagAllocationState()
        containers = self._unit_containers()
        total = len(containers)
        units = []

        for done, container in enumerate(containers, start=1):
            unit = self.create_paragraph_unit(container, state)
            handler.process_paragraph_unit(unit)
            units.append(unit)
            report(round(100 * done / total))

        handler.file_complete()
        handler.complete()
        report(100)

        logger.info(f"Parsed {len(units)} units from {self.document.file_path.name}")
        return units

    def create_paragraph_unit(
        self,
        container: etree._Element,
        state: TagAllocationState
    ) -> ParagraphUnit:
        """
        Build a paragraph unit from a group element.

        Args:
            container: The group wrapping a trans-unit
            state: Tag counters shared by all units of the document

        Returns:
            The paragraph unit; empty and Unspecified when the group holds
            no trans-unit
        """
        trans_unit = self.locator.find(container, 'x:trans-unit')
        if trans_unit is None:
            return ParagraphUnit(
                id=None,
                para_id=None,
                confirmation_level=resolve_confirmation_level(
                    False, None, None, self.workflow_level
                ),
            )

        loc = self.locator
        unit = ParagraphUnit(
            id=trans_unit.get('id'),
            para_id=loc.attr(trans_unit, 'm:para-id'),
        )
        unit.confirmation_level = resolve_confirmation_level(
            True,
            loc.attr(trans_unit, 'm:confirmed'),
            loc.attr(trans_unit, 'm:level-edited'),
            self.workflow_level,
        )
        origin = TranslationOrigin(
            match_percent=resolve_match_percent(loc.attr(trans_unit, 'm:score'))
        )

        unit.source = build_segment(loc.find(trans_unit, 'x:source'), state, is_source=True)

        target_elem = loc.find(trans_unit, 'x:target')
        if target_elem is not None:
            target = build_segment(target_elem, state, is_source=False)
            target.locked = loc.attr(trans_unit, 'm:locked') == 'true'
            if target.is_blank():
                self._apply_alt_trans(trans_unit, target, origin, state)
        else:
            # No target yet: an empty target, counters rebalanced all the same
            target = build_segment(None, state, is_source=False)
        unit.target = target

        trans_origin = resolve_trans_origin(loc.attr(trans_unit, 'm:trans-origin'))
        if trans_origin is not None:
            origin.origin_type = trans_origin
        unit.origin = origin

        comment_elem = loc.find(trans_unit, 'm:comment')
        if comment_elem is not None:
            unit.comments.append(build_comment(comment_elem, self.users))

        return unit

    def _apply_alt_trans(
        self,
        trans_unit: etree._Element,
        target: Segment,
        origin: TranslationOrigin,
        state: TagAllocationState
    ):
        """Fill a blank target from alt-trans/target and classify its origin."""
        alt_target = self.locator.find(trans_unit, 'x:alt-trans/x:target')
        if alt_target is None:
            return
        if not ''.join(alt_target.itertext()).strip():
            return

        # Replaces blank text; continues the target numbering with no second rebalance
        target.runs = list(tokenize_node(alt_target, state, is_source=False))

        raw_origin = self.locator.find(trans_unit, 'x:alt-trans').get('origin')
        if raw_origin is not None:
            origin.origin_type = classify_origin(raw_origin)
            origin.origin_system = raw_origin

    def get_unit_by_id(self, unit_id: str) -> Optional[ParagraphUnit]:
        """
        Get a unit by its trans-unit id.

        The whole document is converted so that tag ids match a full parse.
        """
        for unit in self.parse():
            if unit.id == unit_id:
                return unit
        return None

    def get_file_metadata(self) -> Dict[str, Any]:
        return self.document.get_file_metadata()

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the MXLIFF file.

        Returns:
            Dictionary with statistics:
            - source_language / target_language: Language codes
            - workflow_level: Declared workflow level
            - total_units: Number of translatable units
            - status_counts: Count of units by confirmation level
            - locked_count: Number of locked units
            - commented_count: Number of units carrying a comment
            - average_match: Mean match percentage (0 for an empty file)
        """
        metadata = self.get_file_metadata()
        units = self.parse()

        status_counts: Dict[str, int] = {}
        for unit in units:
            key = unit.confirmation_level.value
            status_counts[key] = status_counts.get(key, 0) + 1

        return {
            'source_language': metadata['source_language'],
            'target_language': metadata['target_language'],
            'workflow_level': metadata['workflow_level'],
            'total_units': len(units),
            'status_counts': status_counts,
            'locked_count': sum(1 for u in units if u.locked),
            'commented_count': sum(1 for u in units if u.comments),
            'average_match': (
                round(sum(u.origin.match_percent for u in units) / len(units), 1)
                if units else 0
            ),
        }


def read_mxliff(file_path: str, progress: Optional[ProgressCallback] = None) -> List[ParagraphUnit]:
    """Parse an MXLIFF file into paragraph units."""
    return MXLIFFParser(file_path).parse(progress=progress)
