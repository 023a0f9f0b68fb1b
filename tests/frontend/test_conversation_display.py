"""Tests for conversation table row formatting."""

import sys
from pathlib import Path

import pytest

FRONTEND_DIR = Path(__file__).parent.parent.parent / "frontend"
sys.path.insert(0, str(FRONTEND_DIR))

from conversation_display import (
    extract_client_email,
    extract_client_name,
    format_timestamp,
    get_conversation_rating,
    pull_date_for,
    subject_preview,
    to_table_row,
)


class TestClientDetails:
    def test_name_from_source_author(self, make_conversation):
        assert extract_client_name(make_conversation()) == "Client"

    def test_name_from_contacts(self):
        conversation = {"source": {}, "contacts": {"contacts": [{"name": "Ana", "email": "ana@example.com"}]}}

        assert extract_client_name(conversation) == "Ana"
        assert extract_client_email(conversation) == "ana@example.com"

    def test_name_from_user_part(self):
        conversation = {"conversation_parts": {"conversation_parts": [
            {"author": {"type": "admin", "name": "Agent"}},
            {"author": {"type": "user", "name": "Bo"}},
        ]}}

        assert extract_client_name(conversation) == "Bo"

    def test_unknown(self):
        assert extract_client_name({}) == "Unknown"
        assert extract_client_email({}) == ""


class TestRating:
    @pytest.mark.parametrize("block,expected", [
        ({"rating": 5}, 5),
        ({"rating": "3"}, 3),
        ({"rating": 0}, None),
        ({"rating": 9}, None),
        ({}, None),
        (None, None),
    ])
    def test_rating(self, block, expected):
        assert get_conversation_rating({"conversation_rating": block}) == expected


class TestSubjectAndTime:
    def test_subject_truncated(self):
        conversation = {"source": {"subject": "x" * 150}}

        assert subject_preview(conversation) == "x" * 100 + "..."

    def test_subject_falls_back_to_first_part(self):
        conversation = {"source": {}, "conversation_parts": [{"body": "Refund please"}]}

        assert subject_preview(conversation) == "Refund please"

    def test_no_subject(self):
        assert subject_preview({}) == "No subject"

    def test_format_timestamp(self):
        assert format_timestamp(1762741000) == "10/11/2025 02:16"
        assert format_timestamp(None) == "N/A"

    def test_format_timestamp_out_of_range(self):
        assert format_timestamp(10**17) == "N/A"


def test_table_row(make_conversation):
    conversation = make_conversation(conv_id="42")
    conversation["participation_part_count"] = 2
    conversation["conversation_rating"] = {"rating": 4}

    row = to_table_row(conversation)

    assert row["Conversation ID"] == "42"
    assert row["Replies"] == 2
    assert row["Rating"] == "★★★★"
    assert row["Email"] == "client@example.com"
    assert row["Created"] == "10/11/2025 02:08"


class TestPullDate:
    def test_single_day(self):
        assert pull_date_for({"admin_id": "1", "start": "2025-11-10", "end": "2025-11-10"}) == "2025-11-10"

    def test_range_is_not_recordable(self):
        assert pull_date_for({"admin_id": "1", "start": "2025-11-06", "end": "2025-11-10"}) is None

    def test_no_query(self):
        assert pull_date_for(None) is None
