"""
Comment handling for MXLIFF units.

Read side: one m:comment element becomes one Comment.
Write side: all comments of a unit are folded into a single new m:comment.
"""

from datetime import datetime, timezone
from typing import List, Optional

from lxml import etree

from .models import Comment, Severity
from .users import UserDirectory

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _text_content(element: etree._Element) -> str:
    return ''.join(element.itertext())


def from_unix_millis(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        millis = int(value)
    except ValueError:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def to_unix_millis(date: datetime) -> int:
    """Unix timestamp in milliseconds. Naive datetimes are taken as UTC."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    delta = date - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def build_comment(element: etree._Element, users: UserDirectory) -> Comment:
    """
    Build a Comment from an m:comment element.

    Unknown or missing authors give an empty author. Only an explicit
    resolved="false" raises the severity.
    """
    created_by = element.get('created-by')
    author = ''
    if created_by:
        author = users.name_for(created_by) or ''

    severity = Severity.LOW
    if element.get('resolved') == 'false':
        severity = Severity.MEDIUM

    return Comment(
        author=author,
        text=_text_content(element),
        date=from_unix_millis(element.get('created-at')),
        severity=severity,
    )


def aggregate_text(comments: List[Comment]) -> str:
    return ' '.join(c.text for c in comments)


def format_comment_date(now: datetime) -> str:
    """
    Compact UTC stamp, e.g. '20240301T9512Z' for 2024-03-01 09:05:12.

    Month and day always get a literal '0' prefix, hours, minutes and
    seconds none. November 23rd therefore renders as '...011023...'.
    """
    return f'{now.year}0{now.month}0{now.day}T{now.hour}{now.minute}{now.second}Z'


def populate_comment_element(
    element: etree._Element,
    comments: List[Comment],
    users: UserDirectory,
    now: Optional[datetime] = None
) -> None:
    """
    Fill a freshly created m:comment element.

    The first comment supplies author and timestamp; the text is every
    comment joined by a space. The modified-* attributes are never updated
    and the comment always starts unresolved.
    """
    first = comments[0]
    date = first.date or now or datetime.now(timezone.utc)

    author_id = users.id_for(first.author)

    element.set('created-at', str(to_unix_millis(date)))
    element.set('created-by', str(author_id) if author_id is not None else '')
    element.set('modified-at', '0')
    element.set('modified-by', '')
    element.set('resolved', 'false')
    element.text = aggregate_text(comments)
