"""
Canonical URL resolution.

A canonical URL exists only once an entity has a slug that can no longer
change: locked for clinics, doctors, jobs and blogs; merely present for
treatments, which have no lock.
"""

from typing import Optional

from .config import DEFAULT_BASE_URL
from .models import CanonicalResolution, Entity, EntityType

ROUTES: dict[EntityType, str] = {
    EntityType.CLINIC: "/clinics/{slug}",
    EntityType.DOCTOR: "/doctor/{slug}",
    EntityType.JOB: "/job-details/{slug}",
    EntityType.BLOG: "/blogs/{slug}",
    EntityType.TREATMENT: "/treatments/{slug}",
}


def get_canonical_url(entity_type: EntityType, entity: Entity, base_url: str = DEFAULT_BASE_URL) -> str:
    """
    Build the canonical URL of an entity.

    Args:
        entity_type: Type of the entity (selects the route).
        entity: The entity.
        base_url: Site origin.

    Returns:
        Absolute canonical URL, or "" when the slug is missing or unlocked.
    """
    if not entity.has_stable_slug:
        return ""
    path = ROUTES[entity_type].format(slug=entity.url_slug.strip())
    return f"{base_url.rstrip('/')}{path}"


def is_canonical_url(
    entity_type: EntityType,
    entity: Entity,
    url: Optional[str],
    base_url: str = DEFAULT_BASE_URL,
) -> bool:
    """Check if a URL equals, or ends with, the entity's canonical URL."""
    canonical = get_canonical_url(entity_type, entity, base_url)
    if not canonical or not url:
        return False
    return url == canonical or url.endswith(canonical)


def resolve_canonical(
    entity_type: EntityType,
    entity: Entity,
    requested_url: Optional[str],
    base_url: str = DEFAULT_BASE_URL,
) -> CanonicalResolution:
    """
    Compare a requested URL with the canonical one.

    Args:
        entity_type: Type of the entity.
        entity: The entity.
        requested_url: URL the page was requested under.
        base_url: Site origin.

    Returns:
        CanonicalResolution; should_redirect is set when the request is not
        canonical but a stable canonical exists.
    """
    canonical = get_canonical_url(entity_type, entity, base_url)
    is_canonical = is_canonical_url(entity_type, entity, requested_url, base_url)
    return CanonicalResolution(
        canonical_url=canonical,
        is_canonical=is_canonical,
        should_redirect=not is_canonical and entity.has_stable_slug,
    )
