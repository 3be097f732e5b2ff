"""
Bilingual content model for MXLIFF documents.

A ParagraphUnit is produced for every translatable unit on read and merged
back into the original tree on write. Segments hold an ordered sequence of
runs: plain text or placeholder tags.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union


class ConfirmationLevel(Enum):
    """Review/approval status of a target segment."""
    UNSPECIFIED = 'Unspecified'
    DRAFT = 'Draft'
    TRANSLATED = 'Translated'
    REJECTED_TRANSLATION = 'RejectedTranslation'
    APPROVED_TRANSLATION = 'ApprovedTranslation'
    REJECTED_SIGN_OFF = 'RejectedSignOff'
    APPROVED_SIGN_OFF = 'ApprovedSignOff'


class Severity(Enum):
    """Comment severity. Unresolved comments are raised to MEDIUM."""
    LOW = 'Low'
    MEDIUM = 'Medium'


@dataclass
class TextRun:
    """A run of plain segment text."""
    text: str


@dataclass
class PlaceholderTag:
    """An inline code or embedded element that must only be repositioned."""
    content: str  # raw matched code, or serialized markup for elements
    display_index: int
    tag_id: int
    is_source: bool
    from_element: bool = False
    locks_editing: bool = False

    @property
    def display_text(self) -> str:
        return f'{{{self.display_index}}}'


Run = Union[TextRun, PlaceholderTag]


@dataclass
class Segment:
    """Ordered sequence of runs. Order is significant."""
    runs: List[Run] = field(default_factory=list)
    locked: bool = False

    def __iter__(self) -> Iterator[Run]:
        return iter(self.runs)

    def __len__(self) -> int:
        return len(self.runs)

    def placeholders(self) -> List[PlaceholderTag]:
        return [run for run in self.runs if isinstance(run, PlaceholderTag)]

    def is_blank(self) -> bool:
        """True when the segment holds nothing but whitespace text."""
        return all(isinstance(run, TextRun) and not run.text.strip() for run in self.runs)

    def plain_text(self) -> str:
        """Render text verbatim and placeholders as their raw content."""
        return ''.join(
            run.content if isinstance(run, PlaceholderTag) else run.text
            for run in self.runs
        )

    def tagged_text(self) -> str:
        """Render placeholders by their display text, e.g. 'Hello {1}world'."""
        return ''.join(
            run.display_text if isinstance(run, PlaceholderTag) else run.text
            for run in self.runs
        )


@dataclass
class Comment:
    author: str
    text: str
    date: Optional[datetime] = None
    severity: Severity = Severity.LOW


@dataclass
class TranslationOrigin:
    """Match percentage and provenance of the target content."""
    match_percent: int = 0
    origin_type: Optional[str] = None
    origin_system: Optional[str] = None  # raw alt-trans origin string


@dataclass
class ParagraphUnit:
    """One translatable unit: a source/target pair plus its metadata."""
    id: Optional[str]
    para_id: Optional[str]
    source: Segment = field(default_factory=Segment)
    target: Segment = field(default_factory=Segment)
    confirmation_level: ConfirmationLevel = ConfirmationLevel.UNSPECIFIED
    origin: TranslationOrigin = field(default_factory=TranslationOrigin)
    comments: List[Comment] = field(default_factory=list)

    @property
    def locked(self) -> bool:
        return self.target.locked

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary used by the server tools."""
        return {
            'unit_id': self.id,
            'para_id': self.para_id,
            'source': self.source.plain_text(),
            'source_tagged': self.source.tagged_text(),
            'target': self.target.plain_text(),
            'target_tagged': self.target.tagged_text(),
            'has_tags': bool(self.source.placeholders() or self.target.placeholders()),
            'status': self.confirmation_level.value,
            'locked': self.locked,
            'match_percent': self.origin.match_percent,
            'origin': self.origin.origin_type,
            'comments': [
                {
                    'author': c.author,
                    'text': c.text,
                    'severity': c.severity.value,
                    'date': c.date.isoformat() if c.date else None,
                }
                for c in self.comments
            ],
        }


@dataclass
class FileProperties:
    """File-level properties handed to a content handler before the units."""
    original_file_path: str
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    workflow_level: int = 0
