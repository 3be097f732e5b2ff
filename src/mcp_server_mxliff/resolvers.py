"""
Confirmation level, match percentage and origin resolution.

Pure functions over raw attribute values. The parser and the writer use the
same functions in opposite directions.
"""

import math
from typing import Optional

from .constants import (
    NULL_TRANS_ORIGIN,
    ORIGIN_MACHINE_TRANSLATION,
    ORIGIN_TRANSLATION_MEMORY,
)
from .models import ConfirmationLevel

# Levels written back as m:confirmed="1"; everything else is "0"
CONFIRMED_LEVELS = frozenset({
    ConfirmationLevel.TRANSLATED,
    ConfirmationLevel.APPROVED_TRANSLATION,
})


def resolve_confirmation_level(
    unit_present: bool,
    confirmed: Optional[str],
    level_edited: Optional[str],
    workflow_level: int
) -> ConfirmationLevel:
    """
    Map m:confirmed / m:level-edited and the document workflow level to a level.

    level-edited only counts when the workflow defines more than one stage:

        confirmed="1", edited  -> ApprovedTranslation
        confirmed="1"          -> Translated
        not confirmed, edited  -> RejectedTranslation
        not confirmed          -> Draft

    The sign-off levels are never produced here.
    """
    if not unit_present:
        return ConfirmationLevel.UNSPECIFIED

    edited = workflow_level > 1 and level_edited == 'true'

    if confirmed == '1':
        if edited:
            return ConfirmationLevel.APPROVED_TRANSLATION
        return ConfirmationLevel.TRANSLATED

    if edited:
        return ConfirmationLevel.REJECTED_TRANSLATION
    return ConfirmationLevel.DRAFT


def confirmed_attribute_value(level: ConfirmationLevel) -> str:
    """Value for m:confirmed. m:level-edited is never written."""
    return '1' if level in CONFIRMED_LEVELS else '0'


def resolve_match_percent(score: Optional[str]) -> int:
    """
    Convert an m:score fraction (0.0-1.0) to a match percentage (0-100).

    Absent, unparsable or non-finite scores give 0.
    """
    if score is None:
        return 0
    try:
        value = float(score) * 100
    except ValueError:
        return 0
    if not math.isfinite(value):
        return 0
    # round() rather than int(): 0.29 * 100 == 28.999999999999996
    return max(0, min(100, round(value)))


def format_score(match_percent: int) -> str:
    """Shortest decimal rendering of percent / 100: 87 -> '0.87', 100 -> '1'."""
    return f'{match_percent / 100:g}'


def classify_origin(origin: Optional[str]) -> Optional[str]:
    """
    Classify an alt-trans origin string.

    Returns:
        'mt' for machine translation, 'tm' for translation memory, or None
        when the string names neither (the raw string is kept elsewhere).
    """
    if not origin:
        return None
    if 'machine' in origin or 'mt' in origin:
        return ORIGIN_MACHINE_TRANSLATION
    if 'tm' in origin:
        return ORIGIN_TRANSLATION_MEMORY
    return None


def resolve_trans_origin(value: Optional[str]) -> Optional[str]:
    """m:trans-origin value, unless absent or the literal string 'null'."""
    if value is None or value == NULL_TRANS_ORIGIN:
        return None
    return value
