"""
Tests for confirmation level, match percentage and origin resolution.
"""

import itertools
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcp_server_mxliff.models import ConfirmationLevel
from mcp_server_mxliff.resolvers import (
    classify_origin,
    confirmed_attribute_value,
    format_score,
    resolve_confirmation_level,
    resolve_match_percent,
    resolve_trans_origin,
)


def expected_level(unit_present, confirmed, level_edited, workflow_level):
    if not unit_present:
        return ConfirmationLevel.UNSPECIFIED
    edited = workflow_level > 1 and level_edited == 'true'
    if confirmed == '1':
        return ConfirmationLevel.APPROVED_TRANSLATION if edited else ConfirmationLevel.TRANSLATED
    return ConfirmationLevel.REJECTED_TRANSLATION if edited else ConfirmationLevel.DRAFT


class TestConfirmationLevel:
    """Decision table for m:confirmed / m:level-edited."""

    @pytest.mark.parametrize(
        'unit_present, confirmed, workflow_level, level_edited',
        list(itertools.product(
            [True, False],
            [None, '0', '1'],
            [0, 1, 2],
            [None, 'false', 'true'],
        ))
    )
    def test_matrix(self, unit_present, confirmed, workflow_level, level_edited):
        result = resolve_confirmation_level(unit_present, confirmed, level_edited, workflow_level)
        assert result == expected_level(unit_present, confirmed, level_edited, workflow_level)

    def test_approved(self):
        assert resolve_confirmation_level(True, '1', 'true', 2) == ConfirmationLevel.APPROVED_TRANSLATION

    def test_translated_when_single_stage(self):
        assert resolve_confirmation_level(True, '1', 'true', 1) == ConfirmationLevel.TRANSLATED

    def test_rejected(self):
        assert resolve_confirmation_level(True, '0', 'true', 3) == ConfirmationLevel.REJECTED_TRANSLATION

    def test_draft_when_confirmed_absent(self):
        assert resolve_confirmation_level(True, None, None, 0) == ConfirmationLevel.DRAFT

    def test_unspecified_without_unit(self):
        assert resolve_confirmation_level(False, '1', 'true', 2) == ConfirmationLevel.UNSPECIFIED

    def test_sign_off_levels_never_produced(self):
        produced = {
            resolve_confirmation_level(*combo)
            for combo in itertools.product([True, False], [None, '0', '1'], [None, 'true'], [0, 2])
        }
        assert ConfirmationLevel.REJECTED_SIGN_OFF not in produced
        assert ConfirmationLevel.APPROVED_SIGN_OFF not in produced


class TestConfirmedAttribute:
    """Inverse mapping used by the writer."""

    @pytest.mark.parametrize('level, value', [
        (ConfirmationLevel.UNSPECIFIED, '0'),
        (ConfirmationLevel.DRAFT, '0'),
        (ConfirmationLevel.TRANSLATED, '1'),
        (ConfirmationLevel.REJECTED_TRANSLATION, '0'),
        (ConfirmationLevel.APPROVED_TRANSLATION, '1'),
        (ConfirmationLevel.REJECTED_SIGN_OFF, '0'),
        (ConfirmationLevel.APPROVED_SIGN_OFF, '0'),
    ])
    def test_mapping(self, level, value):
        assert confirmed_attribute_value(level) == value


class TestMatchPercent:
    """m:score scaling."""

    def test_absent_score(self):
        assert resolve_match_percent(None) == 0

    def test_unparsable_score(self):
        assert resolve_match_percent('high') == 0

    @pytest.mark.parametrize('score, percent', [
        ('0.87', 87),
        ('0.29', 29),
        ('1.0', 100),
        ('0', 0),
        ('0.5', 50),
    ])
    def test_scaling(self, score, percent):
        assert resolve_match_percent(score) == percent

    @pytest.mark.parametrize('score', ['NaN', 'nan', 'inf', '-inf', '1e308'])
    def test_non_finite_score(self, score):
        assert resolve_match_percent(score) == 0

    def test_clamped_to_range(self):
        assert resolve_match_percent('1.5') == 100
        assert resolve_match_percent('-0.2') == 0

    @pytest.mark.parametrize('percent, text', [
        (87, '0.87'),
        (100, '1'),
        (0, '0'),
        (5, '0.05'),
        (50, '0.5'),
    ])
    def test_format_score(self, percent, text):
        assert format_score(percent) == text

    def test_score_round_trip(self):
        assert format_score(resolve_match_percent('0.87')) == '0.87'


class TestOrigin:
    """alt-trans origin classification and m:trans-origin override."""

    @pytest.mark.parametrize('origin, expected', [
        ('machine-translation', 'mt'),
        ('mt', 'mt'),
        ('google-mt', 'mt'),
        ('tm', 'tm'),
        ('tm-match', 'tm'),
        ('human', None),
        ('', None),
        (None, None),
    ])
    def test_classify(self, origin, expected):
        assert classify_origin(origin) == expected

    def test_trans_origin(self):
        assert resolve_trans_origin('tm') == 'tm'
        assert resolve_trans_origin('null') is None
        assert resolve_trans_origin(None) is None


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
