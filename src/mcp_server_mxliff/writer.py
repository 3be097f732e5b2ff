"""
MXLIFF Writer Module

Merges edited paragraph units back into the original MXLIFF tree. Only the
nodes and attributes a unit owns are touched; everything else in the file is
written back as it was read.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional
import logging

from lxml import etree

from .comments import format_comment_date, populate_comment_element
from .document import MXLIFFDocument
from .handlers import ContentHandler
from .models import FileProperties, ParagraphUnit, PlaceholderTag, Segment
from .resolvers import confirmed_attribute_value, format_score, resolve_match_percent

logger = logging.getLogger("mxliff-writer")

ProgressCallback = Callable[[int], None]

# Parser for re-materializing element placeholders
_FRAGMENT_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def fill_element(element: etree._Element, segment: Segment) -> None:
    """
    Replace the content of element with the runs of segment.

    Text runs and inline codes become text. Placeholders captured from
    element children are parsed back into elements, so markup survives a
    read/write cycle.
    """
    for child in list(element):
        element.remove(child)
    element.text = None

    last: Optional[etree._Element] = None

    def add_text(text: str):
        if last is None:
            element.text = (element.text or '') + text
        else:
            last.tail = (last.tail or '') + text

    for run in segment:
        if isinstance(run, PlaceholderTag):
            if run.from_element:
                child = etree.fromstring(run.content, _FRAGMENT_PARSER)
                element.append(child)
                last = child
            else:
                add_text(run.content)
        else:
            add_text(run.text)


class MXLIFFWriter(ContentHandler):
    """Writes paragraph units back into an MXLIFF file."""

    def __init__(
        self,
        file_path: Optional[str] = None,
        output_path: Optional[str] = None,
        document: Optional[MXLIFFDocument] = None
    ):
        """
        Args:
            file_path: Original MXLIFF file; may instead arrive through
                set_file_properties
            output_path: Where file_complete saves; None overwrites the original
            document: Loaded document to merge into instead of file_path
        """
        if document is None and file_path is not None:
            document = MXLIFFDocument(file_path)
        self.document = document
        self.output_path = output_path
        self.dropped_units: List[str] = []

    @property
    def locator(self):
        return self.document.locator

    # Handler hooks, in host order

    def set_file_properties(self, properties: FileProperties) -> None:
        if self.document is None:
            self.document = MXLIFFDocument(properties.original_file_path)

    def process_paragraph_unit(self, unit: ParagraphUnit) -> None:
        self.merge_unit(unit)

    def file_complete(self) -> None:
        self.save(self.output_path)

    # Merge engine

    def merge_unit(self, unit: ParagraphUnit) -> bool:
        """
        Merge one paragraph unit into the tree.

        Args:
            unit: The edited unit; matched by exact trans-unit id

        Returns:
            True if the unit was found and updated, False if it was dropped
        """
        if self.document is None:
            raise RuntimeError("No document loaded; call set_file_properties first")

        trans_unit = None
        if unit.id is not None:
            trans_unit = self.locator.find_unit_by_id(self.document.root, unit.id)
        if trans_unit is None:
            logger.warning(f"Unit '{unit.id}' not found in {self.document.file_path.name}; edits dropped")
            self.dropped_units.append(unit.id)
            return False

        loc = self.locator

        source = loc.find(trans_unit, 'x:source')
        if source is not None:
            fill_element(source, unit.source)

        target = loc.find(trans_unit, 'x:target')
        if target is None:
            target = loc.create_element(trans_unit, 'x:target')
        fill_element(target, unit.target)

        if unit.comments and loc.find(trans_unit, 'm:comment') is None:
            self._add_comments(trans_unit, unit)

        self._update_score(trans_unit, unit.origin.match_percent)

        if loc.has_attr(trans_unit, 'm:locked'):
            loc.set_attr(trans_unit, 'm:locked', 'true' if unit.locked else 'false')

        # m:level-edited is left as it is
        if loc.has_attr(trans_unit, 'm:confirmed'):
            loc.set_attr(trans_unit, 'm:confirmed', confirmed_attribute_value(unit.confirmation_level))

        return True

    def _add_comments(self, trans_unit: etree._Element, unit: ParagraphUnit):
        """Insert a new m:comment right before m:tunit-metadata."""
        metadata = self.locator.find(trans_unit, 'm:tunit-metadata')
        if metadata is None:
            # Without an m:tunit-metadata anchor the comment is not written
            logger.warning(f"Unit '{unit.id}' has no m:tunit-metadata; comment not written")
            return

        comment = self.locator.create_element(
            trans_unit, 'm:comment', index=trans_unit.index(metadata)
        )
        populate_comment_element(comment, unit.comments, self.document.users)
        # Same indentation as the element it now precedes
        previous = comment.getprevious()
        comment.tail = previous.tail if previous is not None else trans_unit.text

        logger.info(f"Comment added to unit '{unit.id}' ({format_comment_date(datetime.now(timezone.utc))})")

    def _update_score(self, trans_unit: etree._Element, match_percent: int):
        """Write m:score, unless the existing value already means the same percentage."""
        current = self.locator.attr(trans_unit, 'm:score')
        if current is not None and resolve_match_percent(current) == match_percent:
            return
        self.locator.set_attr(trans_unit, 'm:score', format_score(match_percent))

    def write_units(
        self,
        units: Iterable[ParagraphUnit],
        output_path: Optional[str] = None,
        progress: Optional[ProgressCallback] = None
    ) -> List[str]:
        """
        Merge a sequence of units and save.

        Args:
            units: Edited units
            output_path: Destination; None overwrites the original
            progress: Called with 0, the rounded percentage after each unit, and 100

        Returns:
            Ids of units that had no match in the document
        """
        units = list(units)

        def report(percent: int):
            if progress is not None:
                progress(percent)

        report(0)
        for done, unit in enumerate(units, start=1):
            self.merge_unit(unit)
            report(round(100 * done / len(units)))
        self.save(output_path)
        report(100)
        return list(self.dropped_units)

    def save(self, output_path: Optional[str] = None):
        self.document.save(output_path)


def write_mxliff(
    original_path: str,
    units: Iterable[ParagraphUnit],
    output_path: Optional[str] = None,
    progress: Optional[ProgressCallback] = None
) -> List[str]:
    """Merge units into the file at original_path; returns dropped unit ids."""
    return MXLIFFWriter(original_path).write_units(units, output_path, progress)
