"""Unit tests for the user and post ranking rules."""

from datetime import datetime, timezone

import pytest

from services.ranking import (
    EPOCH,
    comment_count,
    post_timestamp,
    rank_top_users,
    select_latest,
    select_popular,
)


class TestRankTopUsers:
    def test_top_five_with_stable_ties(self):
        counts = {"1": 3, "2": 9, "3": 9, "4": 1, "5": 5, "6": 7}
        users = {user_id: f"User {user_id}" for user_id in counts}

        top = rank_top_users(users, counts)

        assert [u["id"] for u in top] == ["2", "3", "6", "5", "1"]
        assert top[0] == {"id": "2", "name": "User 2", "postCount": 9}

    def test_tie_order_follows_user_order(self):
        users = {"b": "B", "a": "A", "c": "C"}
        top = rank_top_users(users, {"a": 2, "b": 2, "c": 2})
        assert [u["id"] for u in top] == ["b", "a", "c"]

    def test_fewer_than_limit(self):
        top = rank_top_users({"1": "One"}, {"1": 4})
        assert top == [{"id": "1", "name": "One", "postCount": 4}]

    def test_missing_count_is_zero(self):
        top = rank_top_users({"1": "One", "2": "Two"}, {"2": 1})
        assert top[1] == {"id": "1", "name": "One", "postCount": 0}


class TestCommentCount:
    def test_counts(self):
        assert comment_count({"comments": ["a", "b"]}) == 2
        assert comment_count({"comments": []}) == 0
        assert comment_count({}) == 0
        assert comment_count({"comments": None}) == 0
        assert comment_count({"comments": "not a list"}) == 0


class TestSelectPopular:
    def test_returns_every_post_tied_for_max(self):
        posts = [
            {"id": "p0", "comments": []},
            {"id": "p1", "comments": [1, 2]},
            {"id": "p2", "comments": [3, 4]},
            {"id": "p3", "comments": [5]},
        ]
        assert [p["id"] for p in select_popular(posts)] == ["p1", "p2"]

    def test_not_truncated_to_five(self):
        posts = [{"id": str(i), "comments": [i]} for i in range(8)]
        assert len(select_popular(posts)) == 8

    def test_no_comments_anywhere_returns_all(self):
        posts = [{"id": "a"}, {"id": "b", "comments": []}]
        assert select_popular(posts) == posts

    def test_empty(self):
        assert select_popular([]) == []


class TestPostTimestamp:
    def test_iso_with_z(self):
        ts = post_timestamp({"timestamp": "2024-03-01T12:00:00Z"})
        assert ts == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        ts = post_timestamp({"timestamp": "2024-03-01T12:00:00"})
        assert ts.tzinfo is timezone.utc

    def test_epoch_seconds_and_millis(self):
        assert post_timestamp({"timestamp": 1_700_000_000}) == post_timestamp(
            {"timestamp": 1_700_000_000_000}
        )

    @pytest.mark.parametrize(
        "raw",
        [
            "2024-03-01T12:00:00.1Z",
            "2024-03-01T12:00:00.12Z",
            "2024-03-01T12:00:00.1234Z",
            "2024-03-01T12:00:00.123456+00:00",
            "2024-03-01T14:00:00.12+02:00",
        ],
    )
    def test_fractional_seconds_and_offsets(self, raw):
        ts = post_timestamp({"timestamp": raw})
        assert ts != EPOCH
        assert ts.replace(microsecond=0) == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    def test_missing_or_invalid_is_epoch(self):
        assert post_timestamp({}) == EPOCH
        assert post_timestamp({"timestamp": None}) == EPOCH
        assert post_timestamp({"timestamp": "yesterday"}) == EPOCH
        assert post_timestamp({"timestamp": ""}) == EPOCH
        assert post_timestamp({"timestamp": True}) == EPOCH


class TestSelectLatest:
    def test_five_most_recent_descending(self):
        posts = [{"id": str(day), "timestamp": f"2024-01-{day:02d}T00:00:00Z"} for day in (3, 7, 1, 5, 2, 6, 4)]

        latest = select_latest(posts)

        assert [p["id"] for p in latest] == ["7", "6", "5", "4", "3"]

    def test_missing_timestamp_sorts_last(self):
        posts = [{"id": "none"}, {"id": "old", "timestamp": "2020-01-01T00:00:00Z"}]
        assert [p["id"] for p in select_latest(posts)] == ["old", "none"]

    def test_deterministic_across_calls(self):
        posts = [{"id": "a"}, {"id": "b"}, {"id": "c", "timestamp": "2024-01-01T00:00:00Z"}]
        assert select_latest(posts) == select_latest(posts)
        assert [p["id"] for p in select_latest(posts)] == ["c", "a", "b"]
