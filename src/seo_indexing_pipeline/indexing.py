"""
Indexing decision engine.

Central brain for index/noindex logic. Each entity is evaluated against
ordered guards, first match wins:

1. Entity not found
2. Not approved / not published
3. Slug (or paramlink) missing or not locked
4. Completeness, duplicate and thin-content checks

Rules that differ per entity type (what "complete" and "thin" mean, and the
wording of reasons and warnings) live in IndexingRules strategies. Blogs take
a shorter path of their own.

The engine never raises: internal errors become a noindex decision whose
reason carries the error message.
"""

import logging
from typing import Optional

from .duplicates import DuplicateDetector
from .entity_store import EntityStore
from .models import (
    Blog,
    Clinic,
    Doctor,
    Entity,
    EntityType,
    IndexingDecision,
    Job,
    Priority,
    Treatment,
)

logger = logging.getLogger(__name__)

SLUG_REASON = "Slug not generated or locked"
BLOG_MIN_CONTENT_LENGTH = 100
BLOG_MIN_TITLE_LENGTH = 10
JOB_MIN_DESCRIPTION_LENGTH = 50

THIN_CONTENT_WARNING = "Thin content detected - consider adding more details"


def _filled(value) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


class IndexingRules:
    """Type-specific completeness and thin-content rules."""

    label = "Entity"
    not_visible_reason = "Entity not approved"
    incomplete_reason = "Incomplete profile"
    incomplete_warning = "Profile incomplete - missing required fields"
    duplicate_warning = "Potential duplicate detected"
    thin_warning = THIN_CONTENT_WARNING
    indexed_reason = "Profile complete and unique"

    @property
    def not_found_reason(self) -> str:
        return f"{self.label} not found"

    def is_complete(self, entity: Entity) -> bool:
        raise NotImplementedError

    def is_thin(self, entity: Entity) -> bool:
        raise NotImplementedError


class ClinicRules(IndexingRules):
    label = "Clinic"
    not_visible_reason = "Clinic not approved"
    duplicate_warning = "Potential duplicate clinic name detected"

    def is_complete(self, clinic: Clinic) -> bool:
        has_required = all(_filled(v) for v in (clinic.name, clinic.address, clinic.location))
        return (
            has_required
            and len(clinic.photos) > 0
            and len(clinic.treatments) > 0
            and _filled(clinic.pricing)
        )

    def is_thin(self, clinic: Clinic) -> bool:
        return (
            not clinic.services_name
            and len(clinic.treatments) < 2
            and not clinic.photos
        )


class DoctorRules(IndexingRules):
    label = "Doctor profile"
    not_visible_reason = "Doctor not approved"
    duplicate_warning = "Potential duplicate doctor name detected"

    def is_complete(self, doctor: Doctor) -> bool:
        has_required = all(
            _filled(v) for v in (doctor.degree, doctor.experience, doctor.address, doctor.location)
        )
        has_user_info = bool(doctor.user and _filled(doctor.user.name) and _filled(doctor.user.email))
        return (
            has_required
            and len(doctor.treatments) > 0
            and _filled(doctor.resume_url)
            and has_user_info
        )

    def is_thin(self, doctor: Doctor) -> bool:
        return (
            not doctor.treatments
            and (not doctor.experience or doctor.experience < 1)
            and not doctor.photos
        )


class JobRules(IndexingRules):
    label = "Job"
    not_visible_reason = "Job not approved"
    incomplete_reason = "Incomplete job posting"
    incomplete_warning = "Job posting incomplete - missing required fields"
    duplicate_warning = "Potential duplicate job posting detected"
    thin_warning = "Thin content detected - consider adding more job details"
    indexed_reason = "Job posting complete and unique"

    def is_complete(self, job: Job) -> bool:
        return all(_filled(v) for v in (
            job.job_title,
            job.company_name,
            job.location,
            job.description,
            job.department,
            job.job_type,
            job.salary,
        ))

    def is_thin(self, job: Job) -> bool:
        return len(job.description or "") < JOB_MIN_DESCRIPTION_LENGTH


class TreatmentRules(IndexingRules):
    label = "Treatment"
    not_visible_reason = "Treatment not approved"
    incomplete_reason = "Incomplete treatment"
    incomplete_warning = "Treatment incomplete - missing name"
    duplicate_warning = "Potential duplicate treatment name detected"
    indexed_reason = "Treatment complete and unique"

    def is_complete(self, treatment: Treatment) -> bool:
        return _filled(treatment.name) and treatment.has_slug

    def is_thin(self, treatment: Treatment) -> bool:
        return not _filled(treatment.description) and not treatment.subcategories


RULES: dict[EntityType, IndexingRules] = {
    EntityType.CLINIC: ClinicRules(),
    EntityType.DOCTOR: DoctorRules(),
    EntityType.JOB: JobRules(),
    EntityType.TREATMENT: TreatmentRules(),
}


def _blocked(reason: str, warnings: Optional[list[str]] = None) -> IndexingDecision:
    return IndexingDecision(
        should_index=False,
        reason=reason,
        priority=Priority.LOW,
        warnings=warnings or [],
    )


class IndexingPolicyEngine:
    """
    Decides whether entities should be indexed.

    Duplicate checks are delegated to a DuplicateDetector reading from the
    same store.
    """

    def __init__(self, store: EntityStore, duplicate_detector: Optional[DuplicateDetector] = None):
        """
        Initialize the engine.

        Args:
            store: Entity store.
            duplicate_detector: Detector to use. Defaults to one over the same store.
        """
        self.store = store
        self.duplicate_detector = duplicate_detector or DuplicateDetector(store)

    def decide(self, entity_type: EntityType, entity_id: str) -> IndexingDecision:
        """
        Fetch an entity and decide if it should be indexed.

        Args:
            entity_type: Type of the entity.
            entity_id: Entity id.

        Returns:
            IndexingDecision. Never raises.
        """
        try:
            entity = self.store.find_by_id(entity_type, entity_id)
        except Exception as e:
            logger.error(f"Error in indexing decision for {entity_type.value} {entity_id}: {e}")
            return _blocked(f"Error: {e}")
        return self.decide_for_entity(entity_type, entity)

    def decide_for_entity(self, entity_type: EntityType, entity: Optional[Entity]) -> IndexingDecision:
        """
        Decide if an already-fetched entity should be indexed.

        Args:
            entity_type: Type of the entity.
            entity: The entity, or None when it was not found.

        Returns:
            IndexingDecision. Never raises.
        """
        try:
            if entity_type == EntityType.BLOG:
                return self._decide_blog(entity)
            return self._decide_profile(RULES[entity_type], entity)
        except Exception as e:
            logger.error(f"Error in indexing decision for {entity_type.value}: {e}")
            return _blocked(f"Error: {e}")

    def _decide_profile(self, rules: IndexingRules, entity: Optional[Entity]) -> IndexingDecision:
        if entity is None:
            return _blocked(rules.not_found_reason)
        if not entity.is_visible:
            return _blocked(rules.not_visible_reason)
        if not entity.has_stable_slug:
            return _blocked(SLUG_REASON)

        warnings: list[str] = []

        is_complete = rules.is_complete(entity)
        if not is_complete:
            warnings.append(rules.incomplete_warning)

        is_duplicate = self.duplicate_detector.check(entity).is_duplicate
        if is_duplicate:
            warnings.append(rules.duplicate_warning)

        is_thin = rules.is_thin(entity)
        if is_thin:
            warnings.append(rules.thin_warning)

        if not is_complete:
            return _blocked(rules.incomplete_reason, warnings)
        if is_duplicate and is_thin:
            return _blocked("Duplicate and thin content", warnings)

        # Duplicate-only or thin-only content is still indexed, at low priority
        priority = Priority.LOW if warnings else Priority.HIGH
        return IndexingDecision(
            should_index=True,
            reason=rules.indexed_reason,
            priority=priority,
            warnings=warnings,
        )

    def _decide_blog(self, blog: Optional[Blog]) -> IndexingDecision:
        if blog is None:
            return _blocked("Blog not found")
        if not blog.is_visible:
            return _blocked("Blog not published")
        if not blog.has_stable_slug:
            return _blocked(SLUG_REASON)

        has_content = len(blog.content or "") > BLOG_MIN_CONTENT_LENGTH
        has_title = len(blog.title or "") > BLOG_MIN_TITLE_LENGTH
        if not has_content or not has_title:
            return _blocked("Blog content too thin")

        return IndexingDecision(
            should_index=True,
            reason="Blog published and complete",
            priority=Priority.HIGH,
            warnings=[],
        )
