"""Tests for header normalization"""

import pytest

from tablediff.domain.matching.header_normalizer import headers_equal, normalize_header


class TestNormalizeHeader:
    """Tests for normalize_header"""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Name", "name"),
            ("  First   Name ", "first name"),
            ("E-MAIL\tAddress", "e-mail address"),
            ("", ""),
        ],
    )
    def test_normalization(self, header, expected):
        """Test case folding and whitespace collapsing"""
        assert normalize_header(header) == expected

    @pytest.mark.parametrize("header", ["Name", "  A  b ", "ÄÖ  x", "a\n\nb"])
    def test_idempotent(self, header):
        """Test normalizing twice changes nothing"""
        once = normalize_header(header)
        assert normalize_header(once) == once

    @pytest.mark.parametrize("value", [None, 3, ["a"]])
    def test_non_string(self, value):
        """Test non-string input yields empty string"""
        assert normalize_header(value) == ""

    def test_headers_equal(self):
        """Test equality ignores case and spacing"""
        assert headers_equal("First  Name", "first name")
        assert not headers_equal("Name", "Names")
