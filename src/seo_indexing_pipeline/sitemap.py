"""
Sitemap generation.

Writes one XML sitemap per entity type plus a sitemap index:

    sitemap.xml            (index)
    sitemap-clinics.xml
    sitemap-doctors.xml
    sitemap-jobs.xml
    sitemap-blogs.xml

Only entities the indexing engine approves are listed. Every update rescans
the whole corpus of a type and rewrites its file from scratch; there is no
incremental diff, which keeps output exact for bounded corpora but grows
linearly with corpus size.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .canonical import get_canonical_url
from .config import PipelineConfig
from .entity_store import EntityStore, StatusFilter
from .indexing import IndexingPolicyEngine
from .models import EntityType, Priority, SitemapEntry, SitemapUpdateResult

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
INDEX_FILE = "sitemap.xml"
SITEMAP_FILES: dict[EntityType, str] = {
    EntityType.CLINIC: "sitemap-clinics.xml",
    EntityType.DOCTOR: "sitemap-doctors.xml",
    EntityType.JOB: "sitemap-jobs.xml",
    EntityType.BLOG: "sitemap-blogs.xml",
}

PRIORITY_VALUES = {
    Priority.HIGH: "0.9",
    Priority.MEDIUM: "0.7",
    Priority.LOW: "0.5",
}
CHANGEFREQ = "weekly"


class SitemapError(Exception):
    """Raised when a sitemap file cannot be generated or written."""
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _status_filter(entity_type: EntityType) -> StatusFilter:
    return StatusFilter(
        approved_only=True,
        slug_locked_only=True,
        active_only=entity_type == EntityType.JOB,
    )


def build_urlset(entries: list[SitemapEntry]) -> ET.Element:
    """Build a <urlset> element from entries."""
    root = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in entries:
        url_node = ET.SubElement(root, "url")
        ET.SubElement(url_node, "loc").text = entry.loc
        ET.SubElement(url_node, "lastmod").text = entry.lastmod
        ET.SubElement(url_node, "changefreq").text = entry.changefreq
        ET.SubElement(url_node, "priority").text = entry.priority
    return root


def build_index(locations: list[str], lastmod: str) -> ET.Element:
    """Build a <sitemapindex> element referencing sitemap files."""
    root = ET.Element("sitemapindex", xmlns=SITEMAP_NS)
    for loc in locations:
        sitemap_node = ET.SubElement(root, "sitemap")
        ET.SubElement(sitemap_node, "loc").text = loc
        ET.SubElement(sitemap_node, "lastmod").text = lastmod
    return root


def to_xml(root: ET.Element) -> str:
    """Serialize an element tree with an XML declaration."""
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True).decode("utf-8")


class SitemapBuilder:
    """Builds and writes sitemap files from indexing decisions."""

    def __init__(
        self,
        store: EntityStore,
        engine: IndexingPolicyEngine,
        config: Optional[PipelineConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize the builder.

        Args:
            store: Entity store.
            engine: Indexing engine deciding which entities are listed.
            config: Pipeline configuration (base URL, output directory).
            clock: Source of "now" for lastmod values.
        """
        self.store = store
        self.engine = engine
        self.config = config or PipelineConfig()
        self.clock = clock

    @property
    def output_dir(self) -> Path:
        return self.config.sitemap_dir

    def collect_entries(self, entity_type: EntityType) -> list[SitemapEntry]:
        """
        Decide every eligible entity of a type and keep the indexable ones.

        Args:
            entity_type: Type to scan.

        Returns:
            Sitemap entries in store order.
        """
        entries = []
        for entity in self.store.find_many(entity_type, _status_filter(entity_type)):
            decision = self.engine.decide_for_entity(entity_type, entity)
            if not decision.should_index:
                continue
            lastmod = entity.updated_at or self.clock()
            entries.append(SitemapEntry(
                loc=get_canonical_url(entity_type, entity, self.config.base_url),
                lastmod=lastmod.isoformat(),
                changefreq=CHANGEFREQ,
                priority=PRIORITY_VALUES[decision.priority],
            ))
        return entries

    def generate_sitemap(self, entity_type: EntityType) -> str:
        """Generate the sitemap XML for one entity type."""
        if entity_type not in SITEMAP_FILES:
            raise SitemapError(f"No sitemap for entity type: {entity_type.value}")
        return to_xml(build_urlset(self.collect_entries(entity_type)))

    def generate_index(self) -> str:
        """Generate the sitemap index XML."""
        lastmod = self.clock().isoformat()
        locations = [f"{self.config.base_url}/{name}" for name in SITEMAP_FILES.values()]
        return to_xml(build_index(locations, lastmod))

    def _write(self, filename: str, xml: str) -> None:
        path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(xml, encoding="utf-8")
        except OSError as e:
            raise SitemapError(f"Failed to write {path}: {e}")

    def update_sitemaps(self) -> SitemapUpdateResult:
        """
        Regenerate and rewrite every sitemap file.

        Returns:
            SitemapUpdateResult listing written files, or the error.
        """
        try:
            written = []
            for entity_type, filename in SITEMAP_FILES.items():
                self._write(filename, self.generate_sitemap(entity_type))
                written.append(filename)
            self._write(INDEX_FILE, self.generate_index())
            written.append(INDEX_FILE)
        except Exception as e:
            logger.error(f"Error updating sitemaps: {e}")
            return SitemapUpdateResult(success=False, files=[], error=str(e))

        logger.info(f"Sitemaps updated in {self.output_dir}")
        return SitemapUpdateResult(success=True, files=written)

    def update_entity_sitemap(self, entity_type: EntityType) -> list[str]:
        """
        Rewrite the sitemap of one entity type plus the index.

        Treatments have no sitemap of their own, so only the index is
        rewritten for them.

        Args:
            entity_type: Type whose sitemap changed.

        Returns:
            Written file names.

        Raises:
            SitemapError: If generation or writing fails.
        """
        written = []
        filename = SITEMAP_FILES.get(entity_type)
        if filename:
            self._write(filename, self.generate_sitemap(entity_type))
            written.append(filename)
            logger.info(f"{entity_type.value.capitalize()}s sitemap updated")

        self._write(INDEX_FILE, self.generate_index())
        written.append(INDEX_FILE)
        logger.info("Sitemap index updated")
        return written
