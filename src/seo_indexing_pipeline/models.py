"""
Data models for the SEO indexing pipeline.

This module defines the entity variants consumed from the entity store and
every result structure the pipeline produces (decisions, meta tags, headings,
robots directives, health flags, sitemap and ping reports).
"""

from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EntityType(Enum):
    """Kinds of content the pipeline makes decisions about."""
    CLINIC = "clinic"
    DOCTOR = "doctor"
    JOB = "job"
    BLOG = "blog"
    TREATMENT = "treatment"


class Priority(Enum):
    """Indexing priority of an entity."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Confidence(Enum):
    """Qualitative bucket for a duplicate match."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(Enum):
    """Severity of an SEO health issue."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class OverallHealth(Enum):
    """Overall SEO health bucket."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class IssueType(Enum):
    """Categories of SEO health issues."""
    MISSING_META = "missing_meta"
    CANONICAL_CONFLICT = "canonical_conflict"
    INDEXING_VIOLATION = "indexing_violation"
    DUPLICATE_CONTENT = "duplicate_content"
    THIN_CONTENT = "thin_content"
    INVALID_SLUG = "invalid_slug"
    MISSING_ROBOTS = "missing_robots"


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


# =============================================================================
# Entities
# =============================================================================

@dataclass
class TreatmentRef:
    """A treatment offered by a clinic or doctor."""
    main_treatment: str
    sub_treatments: list[str] = field(default_factory=list)


@dataclass
class DoctorUser:
    """The user account behind a doctor profile (holds name and approval)."""
    name: str = ""
    email: str = ""
    is_approved: bool = False


@dataclass
class Entity:
    """
    Base of every indexable entity.

    The slug and its lock flag are written once by the publishing workflow;
    the pipeline only ever reads them.
    """
    id: str
    slug: Optional[str] = None
    slug_locked: bool = False
    updated_at: Optional[datetime] = None

    entity_type: EntityType = field(init=False, repr=False, default=EntityType.CLINIC)

    @property
    def url_slug(self) -> Optional[str]:
        """The URL segment identifying this entity."""
        return self.slug or None

    @property
    def has_slug(self) -> bool:
        """Check if a slug (or paramlink) is present."""
        return _has_text(self.url_slug)

    @property
    def requires_slug_lock(self) -> bool:
        """Whether a canonical URL needs the slug to be locked first."""
        return True

    @property
    def has_stable_slug(self) -> bool:
        """Check if the slug can back a canonical URL."""
        return self.has_slug and (self.slug_locked or not self.requires_slug_lock)

    @property
    def is_visible(self) -> bool:
        """Check if the entity is approved/published."""
        return False

    @property
    def display_name(self) -> str:
        """Primary identity field (name or title)."""
        return ""


@dataclass
class Clinic(Entity):
    """A clinic profile."""
    name: str = ""
    address: str = ""
    location: str = ""
    photos: list[str] = field(default_factory=list)
    treatments: list[TreatmentRef] = field(default_factory=list)
    pricing: str = ""
    timings: str = ""
    services_name: list[str] = field(default_factory=list)
    is_approved: bool = False

    def __post_init__(self) -> None:
        self.entity_type = EntityType.CLINIC

    @property
    def is_visible(self) -> bool:
        return self.is_approved

    @property
    def display_name(self) -> str:
        return self.name or ""


@dataclass
class Doctor(Entity):
    """A doctor profile. Name and approval live on the linked user."""
    user: Optional[DoctorUser] = None
    degree: str = ""
    experience: Optional[float] = None  # years
    address: str = ""
    location: str = ""
    treatments: list[TreatmentRef] = field(default_factory=list)
    resume_url: str = ""
    photos: list[str] = field(default_factory=list)
    consultation_fee: str = ""
    timings: str = ""

    def __post_init__(self) -> None:
        self.entity_type = EntityType.DOCTOR

    @property
    def is_visible(self) -> bool:
        return bool(self.user and self.user.is_approved)

    @property
    def display_name(self) -> str:
        return self.user.name if self.user and self.user.name else ""


@dataclass
class Job(Entity):
    """A job posting."""
    job_title: str = ""
    company_name: str = ""
    location: str = ""
    description: str = ""
    department: str = ""
    job_type: str = ""
    salary: str = ""
    qualification: str = ""
    status: str = "pending"
    is_active: bool = True

    def __post_init__(self) -> None:
        self.entity_type = EntityType.JOB

    @property
    def is_visible(self) -> bool:
        return self.status == "approved"

    @property
    def display_name(self) -> str:
        return self.job_title or ""


@dataclass
class Blog(Entity):
    """A blog post. Its URL segment is the paramlink, not the slug."""
    title: str = ""
    content: str = ""  # HTML markup from the editor
    paramlink: Optional[str] = None
    status: str = "draft"
    image: Optional[str] = None

    def __post_init__(self) -> None:
        self.entity_type = EntityType.BLOG

    @property
    def url_slug(self) -> Optional[str]:
        return self.paramlink or None

    @property
    def is_visible(self) -> bool:
        return self.status == "published"

    @property
    def display_name(self) -> str:
        return self.title or ""


@dataclass
class Treatment(Entity):
    """A treatment taxonomy node. Treatments have no slug lock."""
    name: str = ""
    description: str = ""
    subcategories: list[str] = field(default_factory=list)
    is_approved: bool = True

    def __post_init__(self) -> None:
        self.entity_type = EntityType.TREATMENT

    @property
    def requires_slug_lock(self) -> bool:
        return False

    @property
    def is_visible(self) -> bool:
        return self.is_approved

    @property
    def display_name(self) -> str:
        return self.name or ""


ENTITY_CLASSES: dict[EntityType, type] = {
    EntityType.CLINIC: Clinic,
    EntityType.DOCTOR: Doctor,
    EntityType.JOB: Job,
    EntityType.BLOG: Blog,
    EntityType.TREATMENT: Treatment,
}


# =============================================================================
# Pipeline results
# =============================================================================

@dataclass
class IndexingDecision:
    """Verdict driving every downstream SEO artifact."""
    should_index: bool
    reason: str
    priority: Priority = Priority.LOW
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "shouldIndex": self.should_index,
            "reason": self.reason,
            "priority": self.priority.value,
            "warnings": list(self.warnings),
        }


@dataclass
class SimilarEntity:
    """A corpus member that resembles the candidate."""
    id: str
    name: str
    similarity: float
    slug: Optional[str] = None


@dataclass
class DuplicateCheck:
    """Result of a duplicate scan."""
    is_duplicate: bool
    confidence: Confidence
    reason: str
    similar_entities: list[SimilarEntity] = field(default_factory=list)
    scan_complete: bool = True  # False when the scan hit its time budget

    def to_dict(self) -> dict[str, Any]:
        return {
            "isDuplicate": self.is_duplicate,
            "confidence": self.confidence.value,
            "reason": self.reason,
            "similarEntities": [
                {"id": e.id, "name": e.name, "slug": e.slug, "similarity": round(e.similarity, 4)}
                for e in self.similar_entities
            ],
            "scanComplete": self.scan_complete,
        }


@dataclass
class MetaTags:
    """Composed head metadata."""
    title: str
    description: str
    keywords: list[str] = field(default_factory=list)
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "keywords": list(self.keywords),
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "ogImage": self.og_image,
        }


@dataclass
class HeadingPlan:
    """H1/H2/H3 outline for an entity page."""
    h1: str
    h2: list[str] = field(default_factory=list)
    h3: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"h1": self.h1, "h2": list(self.h2), "h3": list(self.h3)}


@dataclass
class HeadingValidation:
    """Outcome of validating a heading plan."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class RobotsMeta:
    """Robots meta directive."""
    content: str
    noindex: bool
    nofollow: bool

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "noindex": self.noindex, "nofollow": self.nofollow}


@dataclass
class CanonicalResolution:
    """Canonical URL check for a requested URL."""
    canonical_url: str
    is_canonical: bool
    should_redirect: bool


@dataclass
class SEOIssue:
    """A single problem found by the health auditor."""
    type: IssueType
    severity: Severity
    message: str
    field: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    fix: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
        }
        for key in ("field", "expected", "actual", "fix"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class SEOHealthFlags:
    """Health audit of one entity."""
    entity_type: EntityType
    entity_id: str
    score: int
    overall_health: OverallHealth
    issues: list[SEOIssue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    last_checked: datetime = field(default_factory=datetime.now)

    @property
    def critical_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.CRITICAL)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "score": self.score,
            "overallHealth": self.overall_health.value,
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": list(self.recommendations),
            "lastChecked": self.last_checked.isoformat(),
        }


@dataclass
class SitemapEntry:
    """One <url> element of a sitemap."""
    loc: str
    lastmod: str
    changefreq: str = "weekly"
    priority: str = "0.5"


@dataclass
class SitemapUpdateResult:
    """Outcome of rewriting the sitemap files."""
    success: bool
    files: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PingResult:
    """Outcome of notifying one search engine."""
    engine: str
    url: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class SEOResult:
    """Everything the orchestrator computed for one entity."""
    entity_type: EntityType
    entity_id: str
    success: bool = False
    indexing: Optional[IndexingDecision] = None
    robots: Optional[RobotsMeta] = None
    meta: Optional[MetaTags] = None
    canonical: Optional[str] = None
    duplicate_check: Optional[DuplicateCheck] = None
    headings: Optional[HeadingPlan] = None
    sitemap_updated: bool = False
    errors: list[str] = field(default_factory=list)
    # Detached ping step; never awaited by the orchestrator
    ping_task: Optional["Future[list[PingResult]]"] = field(default=None, repr=False)

    @property
    def ping_scheduled(self) -> bool:
        return self.ping_task is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "indexing": self.indexing.to_dict() if self.indexing else None,
            "robots": self.robots.to_dict() if self.robots else None,
            "meta": self.meta.to_dict() if self.meta else None,
            "canonical": self.canonical,
            "duplicateCheck": self.duplicate_check.to_dict() if self.duplicate_check else None,
            "headings": self.headings.to_dict() if self.headings else None,
            "sitemapUpdated": self.sitemap_updated,
            "pingScheduled": self.ping_scheduled,
            "errors": list(self.errors) or None,
        }
