"""
Unit tests for secure note command parsing.
"""

import pytest

from itdesk.backend.models.enums import NoteCategory
from itdesk.telegram.handlers.passwords import SEND_USAGE, parse_kind


class TestParseKind:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("credentials", NoteCategory.CREDENTIALS),
            ("Password", NoteCategory.PASSWORD),
            ("api_key", NoteCategory.API_KEY),
            ("API key", NoteCategory.API_KEY),
            ("apikey", NoteCategory.API_KEY),
            (" other ", NoteCategory.OTHER),
        ],
    )
    def test_known_kinds(self, value, expected):
        assert parse_kind(value) is expected

    def test_unknown_kind(self):
        assert parse_kind("certificate") is None

    def test_usage_lists_every_kind(self):
        for kind in NoteCategory:
            assert kind.value in SEND_USAGE
