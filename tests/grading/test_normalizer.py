"""
Unit Tests for answer normalisation
"""

import pytest

from exam_engine.grading import normalize_answer


class TestNormalizeAnswer:
    
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("A. Paris", "paris"),
            ("paris", "paris"),
            ("  PARIS  ", "paris"),
            ("c.Blue", "blue"),
            ("B.   Blue ", "blue"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_when_raw_then_canonical(self, raw, expected):
        assert normalize_answer(raw) == expected
    
    def test_normalize_when_two_prefixes_then_strips_only_first(self):
        assert normalize_answer("A. B. Both") == "b. both"
    
    def test_normalize_when_multi_letter_prefix_then_kept(self):
        """Only a single option letter counts as a prefix."""
        assert normalize_answer("St. Louis") == "st. louis"
    
    def test_normalize_when_letter_without_dot_then_kept(self):
        assert normalize_answer("A Paris") == "a paris"
    
    def test_normalize_when_sharp_s_then_not_folded(self):
        """Lowercasing only; no Unicode case folding."""
        assert normalize_answer("STRASSE") == "strasse"
        assert normalize_answer("Straße") == "straße"
        assert normalize_answer("Straße") != normalize_answer("STRASSE")
