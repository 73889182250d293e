"""
SEO pipeline orchestration.

Runs the stages for one entity in a fixed order:

1. Indexing decision
2. Robots directive
3. Meta tags              (indexable entities only, from here on)
4. Canonical URL
5. Duplicate check
6. Heading plan
7. Sitemap update
8. Search engine ping     (detached, never awaited)

Stages 3-7 are isolated: a failure is recorded in SEOResult.errors and the
next stage still runs, so partial results survive.
"""

import logging
from typing import Callable, Optional, TypeVar

from .canonical import get_canonical_url
from .config import PipelineConfig
from .duplicates import DuplicateDetector
from .entity_store import EntityStore
from .headings import plan_headings
from .indexing import IndexingPolicyEngine
from .meta_tags import MetaTagComposer
from .models import Entity, EntityType, SEOResult
from .pinger import SearchEnginePinger
from .robots import get_robots_meta
from .sitemap import SitemapBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SEOOrchestrator:
    """Sequences the SEO stages for single entities."""

    def __init__(
        self,
        store: EntityStore,
        config: Optional[PipelineConfig] = None,
        engine: Optional[IndexingPolicyEngine] = None,
        composer: Optional[MetaTagComposer] = None,
        sitemap_builder: Optional[SitemapBuilder] = None,
        pinger: Optional[SearchEnginePinger] = None,
    ):
        """
        Initialize the orchestrator.

        Components that are not passed in are built from the store and config.

        Args:
            store: Entity store.
            config: Pipeline configuration.
            engine: Indexing engine (its duplicate detector is reused for stage 5).
            composer: Meta tag composer.
            sitemap_builder: Sitemap builder.
            pinger: Search engine pinger.
        """
        self.store = store
        self.config = config or PipelineConfig()
        self.engine = engine or IndexingPolicyEngine(
            store, DuplicateDetector(store, scan_timeout=self.config.duplicate_scan_timeout)
        )
        self.composer = composer or MetaTagComposer(self.config)
        self.sitemap_builder = sitemap_builder or SitemapBuilder(store, self.engine, self.config)
        self.pinger = pinger or SearchEnginePinger(self.config)

    @property
    def duplicate_detector(self) -> DuplicateDetector:
        return self.engine.duplicate_detector

    def _stage(self, label: str, errors: list[str], func: Callable[[], T]) -> Optional[T]:
        try:
            return func()
        except Exception as e:
            logger.error(f"{label} failed: {e}")
            errors.append(f"{label}: {e}")
            return None

    def run(
        self,
        entity_type: EntityType,
        entity_id: str,
        entity: Optional[Entity] = None,
    ) -> SEOResult:
        """
        Run the full pipeline for one entity.

        Args:
            entity_type: Type of the entity.
            entity_id: Entity id.
            entity: Already-fetched entity; fetched from the store when omitted.

        Returns:
            SEOResult. success is False when any of stages 3-7 failed; a
            non-indexable entity is not a failure.
        """
        result = SEOResult(entity_type=entity_type, entity_id=entity_id)
        errors: list[str] = []

        if entity is None:
            try:
                entity = self.store.find_by_id(entity_type, entity_id)
            except Exception as e:
                logger.error(f"Could not fetch {entity_type.value} {entity_id}: {e}")
                errors.append(f"Entity fetch: {e}")

        decision = self.engine.decide_for_entity(entity_type, entity)
        result.indexing = decision
        result.robots = get_robots_meta(decision)
        logger.info(
            f"{entity_type.value} {entity_id}: index={decision.should_index} "
            f"({decision.reason}), robots='{result.robots.content}'"
        )

        if not decision.should_index:
            logger.info(f"Skipping SEO steps for {entity_type.value} {entity_id} - not indexable")
            result.errors = errors
            result.success = not errors
            return result

        result.meta = self._stage(
            "Meta generation", errors,
            lambda: self.composer.compose(entity_type, entity),
        )
        result.canonical = self._stage(
            "Canonical resolution", errors,
            lambda: get_canonical_url(entity_type, entity, self.config.base_url),
        )
        result.duplicate_check = self._stage(
            "Duplicate check", errors,
            lambda: self.duplicate_detector.check(entity),
        )
        result.headings = self._stage(
            "Heading generation", errors,
            lambda: plan_headings(entity_type, entity),
        )
        written = self._stage(
            "Sitemap update", errors,
            lambda: self.sitemap_builder.update_entity_sitemap(entity_type),
        )
        result.sitemap_updated = written is not None

        if self.config.enable_ping:
            result.ping_task = self._schedule_ping()

        result.errors = errors
        result.success = not errors
        logger.info(
            f"Pipeline finished for {entity_type.value} {entity_id}: "
            f"success={result.success}, errors={len(errors)}"
        )
        return result

    def _schedule_ping(self):
        try:
            task = self.pinger.ping_in_background()
        except Exception as e:
            logger.warning(f"Could not schedule search engine ping: {e}")
            return None
        task.add_done_callback(_log_ping_outcome)
        return task

    def quick_check(self, entity_type: EntityType, entity_id: str) -> SEOResult:
        """
        Decision and robots directive only; no sitemap writes or pings.

        Args:
            entity_type: Type of the entity.
            entity_id: Entity id.

        Returns:
            SEOResult with indexing and robots filled in.
        """
        decision = self.engine.decide(entity_type, entity_id)
        return SEOResult(
            entity_type=entity_type,
            entity_id=entity_id,
            success=True,
            indexing=decision,
            robots=get_robots_meta(decision),
        )


def _log_ping_outcome(task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Search engine ping error: {error}")
        return
    failed = [r.engine for r in task.result() if not r.success]
    if failed:
        logger.warning(f"Search engine ping failed for: {', '.join(failed)}")
