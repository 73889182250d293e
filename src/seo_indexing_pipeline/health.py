"""
SEO health auditing.

Runs the pipeline's checks against one entity and aggregates the problems it
finds into a 0-100 score:

- Meta tags (only for indexable entities): presence and length
- Canonical state: missing or unlocked slug, undefined canonical, slug
  shared with another locked entity
- Indexing: decision warnings and blocking reasons as typed issues
- Robots: whether a directive could be determined at all

Each issue costs points by severity (critical 20, warning 10, info 5).
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .cache import TTLCache
from .canonical import get_canonical_url
from .config import PipelineConfig
from .duplicates import DuplicateDetector
from .entity_store import EntityStore, StatusFilter
from .indexing import IndexingPolicyEngine
from .meta_tags import MetaTagComposer
from .models import (
    Entity,
    EntityType,
    IndexingDecision,
    IssueType,
    OverallHealth,
    SEOHealthFlags,
    SEOIssue,
    Severity,
)

logger = logging.getLogger(__name__)

SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 20,
    Severity.WARNING: 10,
    Severity.INFO: 5,
}
HEALTHY_SCORE_THRESHOLD = 70

TITLE_MIN_LENGTH = 30
DESCRIPTION_MIN_LENGTH = 120

GENERAL_RECOMMENDATIONS = {
    IssueType.MISSING_META: "Ensure all meta tags are properly generated and within optimal length",
    IssueType.CANONICAL_CONFLICT: "Resolve canonical URL conflicts to prevent duplicate content issues",
    IssueType.INDEXING_VIOLATION: "Address indexing violations to improve search engine visibility",
    IssueType.DUPLICATE_CONTENT: "Differentiate content from similar pages on the site",
    IssueType.THIN_CONTENT: "Expand thin pages with more substantive content",
}


# =============================================================================
# Scoring
# =============================================================================

def calculate_health_score(issues: list[SEOIssue]) -> int:
    """
    Score a set of issues.

    Args:
        issues: Issues found for one entity.

    Returns:
        100 minus the severity weights, clamped to [0, 100].
    """
    score = 100 - sum(SEVERITY_WEIGHTS[issue.severity] for issue in issues)
    return max(0, min(100, score))


def determine_overall_health(score: int, critical_count: int) -> OverallHealth:
    """Bucket a score; any critical issue makes the entity critical."""
    if critical_count > 0:
        return OverallHealth.CRITICAL
    if score < HEALTHY_SCORE_THRESHOLD:
        return OverallHealth.WARNING
    return OverallHealth.HEALTHY


def generate_recommendations(issues: list[SEOIssue]) -> list[str]:
    """
    Build recommendations from issues.

    Fix strings come first, deduplicated in first-seen order, followed by one
    general recommendation for each issue category present.
    """
    recommendations = list(dict.fromkeys(issue.fix for issue in issues if issue.fix))
    present = {issue.type for issue in issues}
    for issue_type, text in GENERAL_RECOMMENDATIONS.items():
        if issue_type in present and text not in recommendations:
            recommendations.append(text)
    return recommendations


def build_health_flags(entity_type: EntityType, entity_id: str, issues: list[SEOIssue]) -> SEOHealthFlags:
    """Assemble SEOHealthFlags from a list of issues."""
    score = calculate_health_score(issues)
    critical = sum(1 for i in issues if i.severity == Severity.CRITICAL)
    return SEOHealthFlags(
        entity_type=entity_type,
        entity_id=entity_id,
        score=score,
        overall_health=determine_overall_health(score, critical),
        issues=issues,
        recommendations=generate_recommendations(issues),
    )


def _fallback(
    entity_type: EntityType,
    entity_id: str,
    message: str,
    fix: str,
    recommendations: list[str],
) -> SEOHealthFlags:
    return SEOHealthFlags(
        entity_type=entity_type,
        entity_id=entity_id,
        score=0,
        overall_health=OverallHealth.CRITICAL,
        issues=[SEOIssue(
            type=IssueType.INDEXING_VIOLATION,
            severity=Severity.CRITICAL,
            message=message,
            fix=fix,
        )],
        recommendations=recommendations,
    )


# =============================================================================
# Audit summary (admin listing)
# =============================================================================

@dataclass
class AuditSummary:
    """Health counts over a page of audit results."""
    total: int
    healthy: int
    warning: int
    critical: int
    average_score: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "healthy": self.healthy,
            "warning": self.warning,
            "critical": self.critical,
            "averageScore": self.average_score,
        }


def summarize_health(results: list[SEOHealthFlags], total: Optional[int] = None) -> AuditSummary:
    """
    Summarize audit results.

    Args:
        results: Audit results of the current page.
        total: Size of the whole listing. Defaults to len(results).
    """
    def count(health: OverallHealth) -> int:
        return sum(1 for r in results if r.overall_health == health)

    average = round(sum(r.score for r in results) / len(results)) if results else 0
    return AuditSummary(
        total=len(results) if total is None else total,
        healthy=count(OverallHealth.HEALTHY),
        warning=count(OverallHealth.WARNING),
        critical=count(OverallHealth.CRITICAL),
        average_score=average,
    )


# =============================================================================
# Auditor
# =============================================================================

class SEOHealthAuditor:
    """Audits the SEO health of entities."""

    def __init__(
        self,
        store: EntityStore,
        engine: Optional[IndexingPolicyEngine] = None,
        composer: Optional[MetaTagComposer] = None,
        config: Optional[PipelineConfig] = None,
        cache: Optional[TTLCache] = None,
    ):
        """
        Initialize the auditor.

        Args:
            store: Entity store.
            engine: Indexing engine. Defaults to one over the same store.
            composer: Meta tag composer.
            config: Pipeline configuration.
            cache: Optional cache for audit results, keyed per entity.
        """
        self.store = store
        self.config = config or PipelineConfig()
        self.engine = engine or IndexingPolicyEngine(
            store, DuplicateDetector(store, scan_timeout=self.config.duplicate_scan_timeout)
        )
        self.composer = composer or MetaTagComposer(self.config)
        self.cache = cache

    @staticmethod
    def cache_key(entity_type: EntityType, entity_id: str) -> str:
        return f"seo-health:{entity_type.value}:{entity_id}"

    def check(self, entity_type: EntityType, entity_id: str) -> SEOHealthFlags:
        """
        Run a full health check on one entity.

        Args:
            entity_type: Type of the entity.
            entity_id: Entity id.

        Returns:
            SEOHealthFlags. Never raises; internal errors produce a
            critical record with score 0.
        """
        key = self.cache_key(entity_type, entity_id)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Health cache hit for {key}")
                return cached

        try:
            entity = self.store.find_by_id(entity_type, entity_id)
            if entity is None:
                logger.warning(f"{entity_type.value} {entity_id} not found")
                return _fallback(
                    entity_type, entity_id,
                    message="Entity not found",
                    fix="Verify entity ID",
                    recommendations=["Verify entity exists"],
                )
            flags = self._audit(entity_type, entity_id, entity)
        except Exception as e:
            logger.error(f"Error checking SEO health of {entity_type.value} {entity_id}: {e}")
            return _fallback(
                entity_type, entity_id,
                message=f"Error checking SEO health: {e}",
                fix="Review error logs and entity data",
                recommendations=["Review error logs", "Verify entity data integrity"],
            )

        if self.cache is not None:
            self.cache.set(key, flags, tags=(f"seo-health:{entity_type.value}",))
        return flags

    def _audit(self, entity_type: EntityType, entity_id: str, entity: Entity) -> SEOHealthFlags:
        decision = self.engine.decide_for_entity(entity_type, entity)
        logger.debug(
            f"Decision for {entity_type.value} {entity_id}: "
            f"index={decision.should_index} reason='{decision.reason}'"
        )

        issues: list[SEOIssue] = []
        issues.extend(self.check_meta(entity_type, entity, decision))
        issues.extend(self.check_canonical(entity_type, entity))
        issues.extend(check_indexing(decision))
        issues.extend(check_robots(decision))

        flags = build_health_flags(entity_type, entity_id, issues)
        logger.info(
            f"Health of {entity_type.value} {entity_id}: {flags.score}/100 "
            f"({flags.overall_health.value}, {len(issues)} issues)"
        )
        return flags

    def batch_check(self, entity_type: EntityType, entity_ids: list[str]) -> list[SEOHealthFlags]:
        """
        Audit many entities concurrently.

        Args:
            entity_type: Type shared by all ids.
            entity_ids: Ids to audit.

        Returns:
            Results in the same order as entity_ids.
        """
        if not entity_ids:
            return []
        workers = min(self.config.max_workers, len(entity_ids))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(lambda i: self.check(entity_type, i), entity_ids))

        summary = summarize_health(results)
        logger.info(
            f"Batch audit of {len(results)} {entity_type.value}s: "
            f"{summary.healthy} healthy, {summary.warning} warning, {summary.critical} critical"
        )
        return results

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def check_meta(self, entity_type: EntityType, entity: Entity, decision: IndexingDecision) -> list[SEOIssue]:
        """Validate composed meta tags. Only indexable entities are checked."""
        if not decision.should_index:
            return []

        try:
            meta = self.composer.compose(entity_type, entity)
        except Exception as e:
            return [SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.CRITICAL,
                message=f"Error generating meta tags: {e}",
                fix="Check entity data completeness",
            )]

        title_max = self.config.title_max_length
        description_max = self.config.description_max_length
        issues = []

        title = meta.title or ""
        if not title.strip():
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.CRITICAL,
                message="Meta title is missing",
                field="title",
                expected=f"A descriptive title ({TITLE_MIN_LENGTH}-{title_max} characters)",
                fix="Generate meta title from entity name and location",
            ))
        elif len(title) < TITLE_MIN_LENGTH:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.WARNING,
                message="Meta title is too short",
                field="title",
                expected=f"{TITLE_MIN_LENGTH}-{title_max} characters",
                actual=f"{len(title)} characters",
                fix="Expand meta title with more descriptive information",
            ))
        elif len(title) > title_max:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.WARNING,
                message="Meta title is too long",
                field="title",
                expected=f"{TITLE_MIN_LENGTH}-{title_max} characters",
                actual=f"{len(title)} characters",
                fix="Truncate meta title to optimal length",
            ))

        description = meta.description or ""
        if not description.strip():
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.CRITICAL,
                message="Meta description is missing",
                field="description",
                expected=f"A descriptive meta description ({DESCRIPTION_MIN_LENGTH}-{description_max} characters)",
                fix="Generate meta description from entity details",
            ))
        elif len(description) < DESCRIPTION_MIN_LENGTH:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.WARNING,
                message="Meta description is too short",
                field="description",
                expected=f"{DESCRIPTION_MIN_LENGTH}-{description_max} characters",
                actual=f"{len(description)} characters",
                fix="Expand meta description with more details",
            ))
        elif len(description) > description_max:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.WARNING,
                message="Meta description is too long",
                field="description",
                expected=f"{DESCRIPTION_MIN_LENGTH}-{description_max} characters",
                actual=f"{len(description)} characters",
                fix="Truncate meta description to optimal length",
            ))

        if not meta.keywords:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.INFO,
                message="Meta keywords are missing (optional)",
                field="keywords",
                fix="Add relevant keywords for better SEO",
            ))

        if not meta.og_title or not meta.og_description:
            issues.append(SEOIssue(
                type=IssueType.MISSING_META,
                severity=Severity.INFO,
                message="Open Graph tags are missing (optional)",
                field="ogTags",
                fix="Add OG title and description for social media sharing",
            ))

        return issues

    def check_canonical(self, entity_type: EntityType, entity: Entity) -> list[SEOIssue]:
        """
        Check slug and canonical state.

        A missing slug is critical. An unlocked slug is a warning and ends
        the check, since no canonical exists yet. Otherwise the canonical
        must be defined and its slug must not be shared with another locked
        entity of the same type.
        """
        slug_field = "paramlink" if entity_type == EntityType.BLOG else "slug"
        label = "Blog paramlink" if entity_type == EntityType.BLOG else "Slug"

        if not entity.has_slug:
            return [SEOIssue(
                type=IssueType.CANONICAL_CONFLICT,
                severity=Severity.CRITICAL,
                message=f"{label} is missing - canonical URL cannot be generated",
                field=slug_field,
                fix=f"Generate and lock {slug_field} for this entity",
            )]

        if entity.requires_slug_lock and not entity.slug_locked:
            return [SEOIssue(
                type=IssueType.CANONICAL_CONFLICT,
                severity=Severity.WARNING,
                message=f"{label} is not locked - canonical URL may change",
                field="slugLocked",
                fix="Lock slug to prevent canonical URL changes",
            )]

        canonical = get_canonical_url(entity_type, entity, self.config.base_url)
        if not canonical:
            return [SEOIssue(
                type=IssueType.CANONICAL_CONFLICT,
                severity=Severity.CRITICAL,
                message="Canonical URL is missing",
                field="canonical",
                fix="Generate canonical URL from slug",
            )]

        peers = self.store.find_many(entity_type, StatusFilter(
            approved_only=entity_type == EntityType.BLOG,
            slug_locked_only=entity.requires_slug_lock,
        ))
        slug = entity.url_slug.strip()
        if any(p.id != entity.id and (p.url_slug or "").strip() == slug for p in peers):
            return [SEOIssue(
                type=IssueType.CANONICAL_CONFLICT,
                severity=Severity.CRITICAL,
                message="Duplicate canonical URL detected - multiple entities share the same slug",
                field="canonical",
                actual=canonical,
                fix="Regenerate unique slug for this entity",
            )]
        return []


def _mentions(text: str, *phrases: str) -> bool:
    """Whole-word match, so "thin" does not hit "something"."""
    return any(re.search(rf"\b{re.escape(phrase)}\b", text) for phrase in phrases)


def _warning_issue(warning: str) -> SEOIssue:
    text = warning.lower()
    if _mentions(text, "thin"):
        return SEOIssue(
            type=IssueType.THIN_CONTENT,
            severity=Severity.WARNING,
            message=warning,
            fix="Add more content",
        )
    if _mentions(text, "duplicate"):
        return SEOIssue(
            type=IssueType.DUPLICATE_CONTENT,
            severity=Severity.WARNING,
            message=warning,
            fix="Make content unique",
        )
    return SEOIssue(
        type=IssueType.INDEXING_VIOLATION,
        severity=Severity.WARNING,
        message=warning,
        fix="Address the warning to improve SEO health",
    )


def _blocked_issue(reason: str) -> SEOIssue:
    text = reason.lower()
    if _mentions(text, "not approved", "not published"):
        return SEOIssue(
            type=IssueType.INDEXING_VIOLATION,
            severity=Severity.INFO,
            message=f"Entity is not approved or published - will not be indexed: {reason}",
            fix="Wait for admin approval",
        )
    if _mentions(text, "slug"):
        return SEOIssue(
            type=IssueType.INDEXING_VIOLATION,
            severity=Severity.CRITICAL,
            message=f"Slug issue preventing indexing: {reason}",
            fix="Generate and lock slug",
        )
    if _mentions(text, "incomplete"):
        message, fix = f"Entity is incomplete - will not be indexed: {reason}", "Complete required fields"
    elif _mentions(text, "duplicate"):
        message, fix = f"Duplicate content detected - indexing blocked: {reason}", "Make content unique"
    elif _mentions(text, "thin"):
        message, fix = f"Thin content detected - indexing blocked: {reason}", "Add more content"
    else:
        message, fix = f"Indexing blocked: {reason}", "Review indexing decision logic"
    return SEOIssue(
        type=IssueType.INDEXING_VIOLATION,
        severity=Severity.WARNING,
        message=message,
        fix=fix,
    )


def check_indexing(decision: IndexingDecision) -> list[SEOIssue]:
    """
    Turn an indexing decision into issues.

    Warnings of an indexable decision become typed issues; a blocked
    decision yields one issue whose severity depends on the reason.
    """
    if decision.should_index:
        return [_warning_issue(w) for w in decision.warnings]
    return [_blocked_issue(decision.reason)]


def check_robots(decision: IndexingDecision) -> list[SEOIssue]:
    """Flag decisions that failed, leaving the robots directive undetermined."""
    if not decision.should_index and decision.reason.startswith("Error"):
        return [SEOIssue(
            type=IssueType.MISSING_ROBOTS,
            severity=Severity.WARNING,
            message="Unable to determine robots meta tag configuration",
            fix="Review indexing decision service",
        )]
    return []
