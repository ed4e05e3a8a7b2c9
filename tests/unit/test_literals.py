"""
Tests for OData literal encoding.
"""

import pytest

from detail_composite.composition.literals import is_guid, to_odata_literal


class TestToODataLiteral:
    """Tests for to_odata_literal."""

    def test_guid_with_braces_matches_bare_guid(self):
        bare = "6F9619FF-8B86-D011-B42D-00C04FC964FF"
        assert to_odata_literal("{" + bare + "}") == to_odata_literal(bare) == bare

    @pytest.mark.parametrize("value", ["42", "3.14", "-7", "-0.5"])
    def test_numerals_are_unquoted(self, value: str):
        assert to_odata_literal(value) == value

    def test_quotes_are_doubled(self):
        assert to_odata_literal("O'Brien") == "'O''Brien'"

    def test_plain_string_is_quoted(self):
        assert to_odata_literal("ACC-001") == "'ACC-001'"

    def test_value_is_trimmed(self):
        assert to_odata_literal("  42 ") == "42"

    def test_malformed_numeral_is_quoted(self):
        assert to_odata_literal("1.") == "'1.'"


def test_is_guid():
    assert is_guid("{6f9619ff-8b86-d011-b42d-00c04fc964ff}")
    assert not is_guid("6f9619ff-8b86-d011-b42d")
