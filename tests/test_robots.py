"""Tests for robots directive mapping."""

import pytest

from seo_indexing_pipeline.models import IndexingDecision, Priority
from seo_indexing_pipeline.robots import get_robots_meta, robots_headers


@pytest.mark.parametrize("should_index, priority, warnings, expected", [
    (False, Priority.HIGH, [], "noindex, nofollow"),
    (False, Priority.LOW, ["x"], "noindex, nofollow"),
    (True, Priority.HIGH, [], "index, follow"),
    (True, Priority.HIGH, ["Thin content"], "index, follow"),
    (True, Priority.MEDIUM, ["Thin content"], "index, nofollow"),
    (True, Priority.MEDIUM, [], "index, follow"),
    (True, Priority.LOW, [], "noindex, nofollow"),
    (True, Priority.LOW, ["Potential duplicate"], "noindex, nofollow"),
])
def test_robots_table(should_index, priority, warnings, expected):
    decision = IndexingDecision(should_index, "reason", priority, warnings)

    assert get_robots_meta(decision).content == expected


class TestRobotsMeta:
    """Tests for the derived flags."""

    def test_flags_for_noindex(self):
        robots = get_robots_meta(IndexingDecision(False, "Clinic not approved"))

        assert robots.noindex is True
        assert robots.nofollow is True

    def test_flags_for_index_nofollow(self):
        robots = get_robots_meta(IndexingDecision(True, "ok", Priority.MEDIUM, ["w"]))

        assert robots.noindex is False
        assert robots.nofollow is True

    def test_flags_for_index_follow(self):
        robots = get_robots_meta(IndexingDecision(True, "ok", Priority.HIGH))

        assert robots.noindex is False
        assert robots.nofollow is False

    def test_header(self):
        robots = get_robots_meta(IndexingDecision(True, "ok", Priority.HIGH))

        assert robots_headers(robots) == {"X-Robots-Tag": "index, follow"}
