"""
Robots directive mapping.

Pure function from an indexing decision to the robots meta value. No I/O.
"""

from .models import IndexingDecision, Priority, RobotsMeta

INDEX_FOLLOW = "index, follow"
INDEX_NOFOLLOW = "index, nofollow"
NOINDEX_NOFOLLOW = "noindex, nofollow"


def get_robots_meta(decision: IndexingDecision) -> RobotsMeta:
    """
    Map an indexing decision to a robots directive.

    | decision                          | content            |
    |-----------------------------------|--------------------|
    | should_index is False             | noindex, nofollow  |
    | priority high                     | index, follow      |
    | priority medium, with warnings    | index, nofollow    |
    | priority medium, no warnings      | index, follow      |
    | priority low                      | noindex, nofollow  |
    """
    if not decision.should_index:
        content = NOINDEX_NOFOLLOW
    elif decision.priority == Priority.HIGH:
        content = INDEX_FOLLOW
    elif decision.priority == Priority.MEDIUM:
        content = INDEX_NOFOLLOW if decision.warnings else INDEX_FOLLOW
    else:
        content = NOINDEX_NOFOLLOW

    return RobotsMeta(
        content=content,
        noindex=content.startswith("noindex"),
        nofollow=content.endswith("nofollow"),
    )


def robots_headers(robots: RobotsMeta) -> dict[str, str]:
    """HTTP response headers carrying the directive."""
    return {"X-Robots-Tag": robots.content}
