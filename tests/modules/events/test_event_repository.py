"""
Unit tests for event query filters.
"""

import pytest
from sqlalchemy.sql import operators

from schoolhub.modules.events.repository import search_filter


class TestSearchFilter:
    def test_matches_title_header_and_body(self):
        clause = search_filter("Rizal")

        assert [c.left.key for c in clause.clauses] == ["title", "header", "body"]
        for comparison in clause.clauses:
            assert comparison.operator is operators.ilike_op
            assert comparison.right.value == "%Rizal%"

    @pytest.mark.parametrize(
        ("term", "expected"),
        [
            ("50%", "%50\\%%"),
            ("grade_7", "%grade\\_7%"),
            ("C:\\docs", "%C:\\\\docs%"),
        ],
    )
    def test_wildcards_are_escaped(self, term, expected):
        clause = search_filter(term)

        for comparison in clause.clauses:
            assert comparison.right.value == expected
            assert comparison.modifiers["escape"] == "\\"
