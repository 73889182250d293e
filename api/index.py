"""
FastAPI wrapper for the SEO Indexing Pipeline.

Exposes the per-entity SEO pipeline and the admin health audit listing as a
REST API. Entities are read from the JSON export named by SEO_ENTITIES_FILE.
"""

import logging
import os
from datetime import datetime, timezone
from functools import lru_cache
from math import ceil
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from seo_indexing_pipeline import __version__
from seo_indexing_pipeline.cache import TTLCache
from seo_indexing_pipeline.config import PipelineConfig
from seo_indexing_pipeline.entity_store import (
    APPROVED,
    EntityLoadError,
    EntityStore,
    InMemoryEntityStore,
    load_entities_json,
)
from seo_indexing_pipeline.health import SEOHealthAuditor, summarize_health
from seo_indexing_pipeline.models import EntityType, SEOHealthFlags, Severity
from seo_indexing_pipeline.orchestrator import SEOOrchestrator
from seo_indexing_pipeline.robots import robots_headers

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_PAGE_SIZE = 7
MAX_AUDIT_PAGE_SIZE = 100
HEALTH_CACHE_TTL = 300.0

app = FastAPI(
    title="SEO Indexing Pipeline API",
    description="Indexing decisions, SEO metadata, sitemaps and health audits for clinics, doctors, jobs and blogs",
    version=__version__,
)

# Enable CORS for all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache(maxsize=1)
def get_config() -> PipelineConfig:
    """Pipeline configuration from SEO_* environment variables."""
    return PipelineConfig.from_env()


@lru_cache(maxsize=4)
def _load_entities(path: str) -> InMemoryEntityStore:
    return load_entities_json(path)


def get_store() -> EntityStore:
    """Entity store loaded from SEO_ENTITIES_FILE (empty when unset)."""
    path = os.environ.get("SEO_ENTITIES_FILE")
    if not path:
        logger.warning("SEO_ENTITIES_FILE not set, serving an empty entity store")
        return InMemoryEntityStore()
    try:
        return _load_entities(path)
    except EntityLoadError as e:
        raise HTTPException(status_code=500, detail=f"Entity store unavailable: {e}")


@lru_cache(maxsize=1)
def get_cache() -> Optional[TTLCache]:
    """Shared cache for health audit results."""
    return TTLCache(default_ttl=HEALTH_CACHE_TTL)


def _entity_type(value: str) -> EntityType:
    try:
        return EntityType(value)
    except ValueError:
        valid = ", ".join(t.value for t in EntityType)
        raise HTTPException(status_code=400, detail=f"Invalid entity type. Must be one of: {valid}")


# ============================================================================
# Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class PipelineResponse(BaseModel):
    """Response model for a pipeline run."""
    success: bool
    entity_type: str
    entity_id: str
    indexing: dict
    robots: dict
    meta: Optional[dict] = None
    canonical: Optional[str] = None
    duplicate_check: Optional[dict] = None
    headings: Optional[dict] = None
    sitemap_updated: bool = False
    ping_scheduled: bool = False
    errors: list[str] = Field(default_factory=list)


class EntityHealth(BaseModel):
    """Health block of one audited entity."""
    overall_health: str
    score: int
    issues_count: int
    critical_issues: int
    warning_issues: int
    info_issues: int
    issues: list[dict]
    recommendations: list[str]
    last_checked: datetime


class AuditedEntity(BaseModel):
    """One row of the admin audit listing."""
    id: str
    display_name: str
    slug: Optional[str] = None
    slug_locked: bool = False
    health: EntityHealth


class AuditSummaryModel(BaseModel):
    total: int
    healthy: int
    warning: int
    critical: int
    average_score: int


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool


class AuditResponse(BaseModel):
    """Response model for the admin audit listing."""
    success: bool
    entity_type: str
    entities: list[AuditedEntity]
    summary: AuditSummaryModel
    pagination: Pagination
    last_updated: datetime


def _health_block(flags: SEOHealthFlags) -> EntityHealth:
    def count(severity: Severity) -> int:
        return sum(1 for issue in flags.issues if issue.severity == severity)

    return EntityHealth(
        overall_health=flags.overall_health.value,
        score=flags.score,
        issues_count=len(flags.issues),
        critical_issues=count(Severity.CRITICAL),
        warning_issues=count(Severity.WARNING),
        info_issues=count(Severity.INFO),
        issues=[issue.to_dict() for issue in flags.issues],
        recommendations=flags.recommendations,
        last_checked=flags.last_checked,
    )


# ============================================================================
# Routes
# ============================================================================

@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.get("/api/seo/{entity_type}/{entity_id}", response_model=PipelineResponse)
def run_pipeline(
    entity_type: str,
    entity_id: str,
    response: Response,
    store: EntityStore = Depends(get_store),
    config: PipelineConfig = Depends(get_config),
    cache: Optional[TTLCache] = Depends(get_cache),
):
    """
    Run the SEO pipeline for one entity.

    The robots directive is also returned as an X-Robots-Tag header.
    """
    kind = _entity_type(entity_type)

    result = SEOOrchestrator(store, config).run(kind, entity_id)
    if cache is not None:
        cache.invalidate(SEOHealthAuditor.cache_key(kind, entity_id))

    response.headers.update(robots_headers(result.robots))
    return PipelineResponse(
        success=result.success,
        entity_type=kind.value,
        entity_id=entity_id,
        indexing=result.indexing.to_dict(),
        robots=result.robots.to_dict(),
        meta=result.meta.to_dict() if result.meta else None,
        canonical=result.canonical,
        duplicate_check=result.duplicate_check.to_dict() if result.duplicate_check else None,
        headings=result.headings.to_dict() if result.headings else None,
        sitemap_updated=result.sitemap_updated,
        ping_scheduled=result.ping_scheduled,
        errors=result.errors,
    )


@app.get("/api/seo/{entity_type}/{entity_id}/health")
def entity_health(
    entity_type: str,
    entity_id: str,
    store: EntityStore = Depends(get_store),
    config: PipelineConfig = Depends(get_config),
    cache: Optional[TTLCache] = Depends(get_cache),
):
    """SEO health audit of one entity."""
    kind = _entity_type(entity_type)
    auditor = SEOHealthAuditor(store, config=config, cache=cache)
    return auditor.check(kind, entity_id).to_dict()


@app.get("/api/admin/seo-audit", response_model=AuditResponse)
def seo_audit(
    entity_type: str = Query("clinic", description="clinic, doctor, job, blog or treatment"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_AUDIT_PAGE_SIZE, ge=1, le=MAX_AUDIT_PAGE_SIZE),
    store: EntityStore = Depends(get_store),
    config: PipelineConfig = Depends(get_config),
    cache: Optional[TTLCache] = Depends(get_cache),
):
    """
    Paginated SEO health audit of approved entities of one type.

    Summary counts cover the current page; summary.total is the size of the
    whole listing.
    """
    kind = _entity_type(entity_type)

    entities = store.find_many(kind, APPROVED)
    total = len(entities)
    start = (page - 1) * limit
    page_entities = entities[start:start + limit]

    auditor = SEOHealthAuditor(store, config=config, cache=cache)
    results = auditor.batch_check(kind, [e.id for e in page_entities])
    summary = summarize_health(results, total=total)
    total_pages = ceil(total / limit)

    logger.info(
        f"SEO audit of {kind.value}s page {page}/{total_pages}: "
        f"{summary.healthy} healthy, {summary.warning} warning, {summary.critical} critical"
    )

    return AuditResponse(
        success=True,
        entity_type=kind.value,
        entities=[
            AuditedEntity(
                id=entity.id,
                display_name=entity.display_name,
                slug=entity.url_slug,
                slug_locked=entity.slug_locked,
                health=_health_block(flags),
            )
            for entity, flags in zip(page_entities, results)
        ],
        summary=AuditSummaryModel(**vars(summary)),
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_more=page < total_pages,
        ),
        last_updated=datetime.now(timezone.utc),
    )


@app.get("/api/info")
def api_info():
    """Get API information and usage instructions."""
    return {
        "name": "SEO Indexing Pipeline API",
        "version": __version__,
        "description": "SEO indexing decisions and health audits",
        "endpoints": {
            "GET /api/health": "Health check",
            "GET /api/seo/{entity_type}/{entity_id}": "Run the SEO pipeline for one entity",
            "GET /api/seo/{entity_type}/{entity_id}/health": "SEO health audit of one entity",
            "GET /api/admin/seo-audit": "Paginated SEO health audit (entity_type, page, limit)",
            "GET /api/info": "This endpoint",
        },
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }
