"""Tests for the privacy filter.

Run with: python3 -m pytest tests/test_privacy.py -v
"""

from impactboard.privacy import filter_opted_out


class TestFilterOptedOut:

    def test_removes_opted_out_and_keeps_order(self, users):
        public = filter_opted_out(users, {2, 4})
        assert [s.user_login for s in public] == ["alice", "carol"]

    def test_input_not_modified(self, users):
        before = list(users)
        filter_opted_out(users, {1})
        assert users == before

    def test_nothing_opted_out(self, users):
        public = filter_opted_out(users, frozenset())
        assert public == users
        assert public is not users

    def test_unknown_ids_ignored(self, users):
        assert len(filter_opted_out(users, {42})) == 4

    def test_empty_input(self):
        assert filter_opted_out([], {1}) == []
