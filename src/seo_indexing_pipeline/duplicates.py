"""
Duplicate content detection.

Scans the approved/published peers of an entity and reports near-duplicates,
which dilute search rankings when indexed side by side.

Each entity type has a profile: the fields compared (with weights), the
similarity floor a peer must exceed to be recorded, and the threshold above
which a match counts as medium confidence. Any match above 0.9 is high
confidence, and an exact case-insensitive match on the identity field(s)
makes the result high confidence regardless of fuzzy scores.

The scan is O(corpus size x string length^2). Large corpora are bounded by
a time budget: when it runs out the scan stops early and the result is
flagged with scan_complete=False. Thresholds never change.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .entity_store import APPROVED, EntityStore
from .models import (
    Confidence,
    Doctor,
    DuplicateCheck,
    Entity,
    EntityType,
    SimilarEntity,
)
from .similarity import weighted_similarity

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_THRESHOLD = 0.9
MAX_SIMILAR_ENTITIES = 5
BLOG_CONTENT_PREFIX = 500  # characters of blog content compared

FieldGetter = Callable[[Entity], str]


@dataclass(frozen=True)
class DuplicateProfile:
    """Comparison rules for one entity type."""
    label: str
    fields: tuple[tuple[FieldGetter, float], ...]
    inclusion_floor: float
    medium_threshold: float
    exact_key: Callable[[Entity], tuple[str, ...]]
    peer_name: FieldGetter
    exact_reason: str  # formatted with count=


def _doctor_name(doctor: Doctor) -> str:
    return doctor.user.name if doctor.user and doctor.user.name else ""


PROFILES: dict[EntityType, DuplicateProfile] = {
    EntityType.CLINIC: DuplicateProfile(
        label="clinic",
        fields=(
            (lambda c: c.name, 0.7),
            (lambda c: c.address, 0.3),
        ),
        inclusion_floor=0.8,
        medium_threshold=0.85,
        exact_key=lambda c: (c.name,),
        peer_name=lambda c: c.name,
        exact_reason="Exact name match found: {count} clinic(s) with same name",
    ),
    EntityType.DOCTOR: DuplicateProfile(
        label="doctor",
        fields=(
            (_doctor_name, 0.6),
            (lambda d: d.address, 0.2),
            (lambda d: d.degree, 0.2),
        ),
        inclusion_floor=0.85,
        medium_threshold=0.87,
        exact_key=lambda d: (_doctor_name(d),),
        peer_name=_doctor_name,
        exact_reason="Exact name match found: {count} doctor(s) with same name",
    ),
    EntityType.JOB: DuplicateProfile(
        label="job",
        fields=(
            (lambda j: j.job_title, 0.6),
            (lambda j: j.company_name, 0.4),
        ),
        inclusion_floor=0.85,
        medium_threshold=0.87,
        exact_key=lambda j: (j.job_title, j.company_name),
        peer_name=lambda j: f"{j.job_title} at {j.company_name}",
        exact_reason="Exact match found: {count} job(s) with same title and company",
    ),
    EntityType.BLOG: DuplicateProfile(
        label="blog",
        fields=(
            (lambda b: b.title, 0.6),
            (lambda b: (b.content or "")[:BLOG_CONTENT_PREFIX], 0.4),
        ),
        inclusion_floor=0.85,
        medium_threshold=0.87,
        exact_key=lambda b: (b.title,),
        peer_name=lambda b: b.title or "Untitled",
        exact_reason="Exact title match found: {count} blog(s) with same title",
    ),
    EntityType.TREATMENT: DuplicateProfile(
        label="treatment",
        fields=(
            (lambda t: t.name, 1.0),
        ),
        inclusion_floor=0.8,
        medium_threshold=0.85,
        exact_key=lambda t: (t.name,),
        peer_name=lambda t: t.name,
        exact_reason="Exact name match found: {count} treatment(s) with same name",
    ),
}


def _normalize_key(key: tuple[str, ...]) -> Optional[tuple[str, ...]]:
    """Lowercase an identity key; None if any part is blank."""
    parts = tuple((part or "").strip().lower() for part in key)
    if not all(parts):
        return None
    return parts


def classify_confidence(highest_similarity: float, profile: DuplicateProfile) -> Confidence:
    """
    Map the best fuzzy similarity to a confidence bucket.

    Args:
        highest_similarity: Maximum recorded combined similarity.
        profile: Profile of the entity type.

    Returns:
        Confidence bucket.
    """
    if highest_similarity > HIGH_CONFIDENCE_THRESHOLD:
        return Confidence.HIGH
    if highest_similarity > profile.medium_threshold:
        return Confidence.MEDIUM
    return Confidence.LOW


def compare_entities(candidate: Entity, peer: Entity) -> float:
    """Combined similarity of two entities of the same type."""
    profile = PROFILES[candidate.entity_type]
    return weighted_similarity(
        (getter(candidate), getter(peer), weight) for getter, weight in profile.fields
    )


class DuplicateDetector:
    """
    Detects near-duplicate entities among approved/published peers.

    The detector only reads from the store; each check works on a fresh
    snapshot of the corpus.
    """

    def __init__(self, store: EntityStore, scan_timeout: Optional[float] = None):
        """
        Initialize the detector.

        Args:
            store: Entity store to read the corpus from.
            scan_timeout: Time budget per corpus scan in seconds (None = unbounded).
        """
        self.store = store
        self.scan_timeout = scan_timeout

    def check(self, entity: Entity) -> DuplicateCheck:
        """
        Check an entity against its same-type peers.

        Args:
            entity: Candidate entity.

        Returns:
            DuplicateCheck with up to 5 similar entities, most similar first.
        """
        profile = PROFILES[entity.entity_type]
        peers = [
            p for p in self.store.find_many(entity.entity_type, APPROVED)
            if p.id != entity.id
        ]
        return self._scan(entity, peers, profile)

    def _scan(self, entity: Entity, peers: list[Entity], profile: DuplicateProfile) -> DuplicateCheck:
        deadline = None
        if self.scan_timeout is not None:
            deadline = time.monotonic() + self.scan_timeout

        candidate_key = _normalize_key(profile.exact_key(entity))
        similar: list[SimilarEntity] = []
        exact_matches = 0
        scan_complete = True

        for scanned, peer in enumerate(peers):
            if deadline is not None and time.monotonic() > deadline:
                logger.warning(
                    f"Duplicate scan for {profile.label} {entity.id} stopped after "
                    f"{scanned}/{len(peers)} peers (time budget {self.scan_timeout}s)"
                )
                scan_complete = False
                break

            if candidate_key is not None and _normalize_key(profile.exact_key(peer)) == candidate_key:
                exact_matches += 1

            # Peers without an identity are not comparable
            if not profile.peer_name(peer).strip():
                continue

            combined = compare_entities(entity, peer)
            if combined > profile.inclusion_floor:
                similar.append(SimilarEntity(
                    id=peer.id,
                    name=profile.peer_name(peer),
                    slug=peer.url_slug,
                    similarity=combined,
                ))

        similar.sort(key=lambda e: e.similarity, reverse=True)

        if exact_matches:
            confidence = Confidence.HIGH
            reason = profile.exact_reason.format(count=exact_matches)
        elif similar:
            highest = similar[0].similarity
            confidence = classify_confidence(highest, profile)
            reason = (
                f"Similar {profile.label}s found: {len(similar)} {profile.label}(s) "
                f"with {highest * 100:.0f}% similarity"
            )
        else:
            confidence = Confidence.LOW
            reason = "No duplicates detected"

        return DuplicateCheck(
            is_duplicate=bool(exact_matches or similar),
            confidence=confidence,
            reason=reason,
            similar_entities=similar[:MAX_SIMILAR_ENTITIES],
            scan_complete=scan_complete,
        )
