"""
SEO Indexing Pipeline

Decides, for clinics, doctors, jobs, blogs and treatments:
- Whether each entity should be indexed, and with which robots directive
- Its canonical URL, meta tags and heading outline
- Whether it duplicates existing content
- How healthy its SEO state is (0-100 score)

and keeps the XML sitemaps and search engine pings in step.
"""

__version__ = "1.0.0"
__author__ = "SEO Indexing Pipeline Team"

from .config import PipelineConfig

from .models import (
    EntityType,
    Priority,
    Confidence,
    Severity,
    OverallHealth,
    IssueType,
    Entity,
    Clinic,
    Doctor,
    DoctorUser,
    Job,
    Blog,
    Treatment,
    TreatmentRef,
    IndexingDecision,
    DuplicateCheck,
    SimilarEntity,
    MetaTags,
    HeadingPlan,
    HeadingValidation,
    RobotsMeta,
    CanonicalResolution,
    SEOIssue,
    SEOHealthFlags,
    SitemapUpdateResult,
    PingResult,
    SEOResult,
)

from .entity_store import (
    EntityStore,
    InMemoryEntityStore,
    StatusFilter,
    EntityLoadError,
    load_entities_json,
)

from .similarity import calculate_similarity
from .duplicates import DuplicateDetector
from .indexing import IndexingPolicyEngine
from .canonical import get_canonical_url, is_canonical_url, resolve_canonical
from .meta_tags import MetaTagComposer
from .headings import plan_headings, validate_headings
from .robots import get_robots_meta, robots_headers
from .sitemap import SitemapBuilder, SitemapError
from .pinger import SearchEnginePinger
from .health import SEOHealthAuditor, calculate_health_score
from .cache import TTLCache
from .orchestrator import SEOOrchestrator

__all__ = [
    # Configuration
    "PipelineConfig",
    # Enums
    "EntityType",
    "Priority",
    "Confidence",
    "Severity",
    "OverallHealth",
    "IssueType",
    # Entities
    "Entity",
    "Clinic",
    "Doctor",
    "DoctorUser",
    "Job",
    "Blog",
    "Treatment",
    "TreatmentRef",
    # Results
    "IndexingDecision",
    "DuplicateCheck",
    "SimilarEntity",
    "MetaTags",
    "HeadingPlan",
    "HeadingValidation",
    "RobotsMeta",
    "CanonicalResolution",
    "SEOIssue",
    "SEOHealthFlags",
    "SitemapUpdateResult",
    "PingResult",
    "SEOResult",
    # Entity store
    "EntityStore",
    "InMemoryEntityStore",
    "StatusFilter",
    "EntityLoadError",
    "load_entities_json",
    # Pipeline components
    "calculate_similarity",
    "DuplicateDetector",
    "IndexingPolicyEngine",
    "get_canonical_url",
    "is_canonical_url",
    "resolve_canonical",
    "MetaTagComposer",
    "plan_headings",
    "validate_headings",
    "get_robots_meta",
    "robots_headers",
    "SitemapBuilder",
    "SitemapError",
    "SearchEnginePinger",
    "SEOHealthAuditor",
    "calculate_health_score",
    "TTLCache",
    "SEOOrchestrator",
]
