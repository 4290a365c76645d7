"""
Model and timestamp helper tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from promptfeed.models.core import Authenticated, Prompt
from promptfeed.utils.timestamp_utils import parse_timestamp, provisional_id, relative_time, to_millis

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestPromptRecord:

    def test_from_record_fills_social_defaults(self):
        prompt = Prompt.from_record({
            'id': 3,
            'title': 't',
            'content': 'c',
            'category': '',
            'created_at': '2025-03-01T12:00:00Z',
            'liked_by_user': True
        })

        assert prompt.id == '3'
        assert prompt.category is None
        assert prompt.likes == 0
        assert prompt.liked_by_user is False
        assert prompt.comments == ()
        assert prompt.created_at == NOW

    def test_from_record_keeps_comments_in_order(self):
        prompt = Prompt.from_record({
            'id': '1',
            'author_id': 'u1',
            'author_name': 'Uma',
            'title': 't',
            'content': 'c',
            'created_at': '2025-03-01T12:00:00+00:00',
            'likes': 4,
            'comments': [
                {'id': 'c1', 'user_name': 'A', 'text': 'first', 'created_at': '2025-03-01T12:01:00Z'},
                {'id': 'c2', 'user_name': 'B', 'text': 'second', 'created_at': '2025-03-01T12:02:00Z'},
            ]
        })

        assert (prompt.author_id, prompt.author_name, prompt.likes) == ('u1', 'Uma', 4)
        assert [c.text for c in prompt.comments] == ['first', 'second']


class TestDisplayName:

    @pytest.mark.parametrize('full_name,email,expected', [
        ('Alice Liddell', 'alice@example.com', 'Alice Liddell'),
        (None, 'alice@example.com', 'alice'),
        ('  ', None, 'Anonymous'),
        (None, None, 'Anonymous'),
    ])
    def test_derive_display_name(self, full_name, email, expected):
        assert Authenticated.derive_display_name(full_name, email) == expected


class TestTimestamps:

    @pytest.mark.parametrize('delta,expected', [
        (timedelta(seconds=30), 'Just now'),
        (timedelta(minutes=5), '5m ago'),
        (timedelta(hours=3), '3h ago'),
        (timedelta(days=2), '2d ago'),
        (timedelta(days=10), '2025-02-19'),
    ])
    def test_relative_time(self, delta, expected):
        assert relative_time(NOW - delta, now=NOW) == expected

    def test_parse_timestamp_variants(self):
        assert parse_timestamp('2025-03-01T12:00:00Z') == NOW
        assert parse_timestamp('2025-03-01T12:00:00') == NOW
        assert parse_timestamp(NOW.timestamp()) == NOW
        with pytest.raises(ValueError):
            parse_timestamp(None)

    def test_to_millis(self):
        assert to_millis(1.5) == 1500

    def test_provisional_ids_are_unique(self):
        assert provisional_id() != provisional_id()
        assert provisional_id('comment').startswith('comment-')
