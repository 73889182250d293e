"""
Entity store interface consumed by the pipeline.

The persistence layer lives outside this package. The pipeline only needs
two read operations, described by the EntityStore protocol. An in-memory
implementation (optionally loaded from a JSON export) backs the CLI, the
API and the tests.
"""

import json
import re
from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Union

from .models import (
    ENTITY_CLASSES,
    Blog,
    Doctor,
    DoctorUser,
    Entity,
    EntityType,
    Job,
    TreatmentRef,
)


class EntityLoadError(Exception):
    """Raised when entities cannot be loaded from an export file."""
    pass


@dataclass(frozen=True)
class StatusFilter:
    """Restricts find_many to entities in a given publication state."""
    approved_only: bool = False
    slug_locked_only: bool = False
    active_only: bool = False  # jobs only

    def matches(self, entity: Entity) -> bool:
        """Check if an entity passes this filter."""
        if self.approved_only and not entity.is_visible:
            return False
        if self.slug_locked_only and not (entity.has_slug and entity.slug_locked):
            return False
        if self.active_only and isinstance(entity, Job) and not entity.is_active:
            return False
        return True


APPROVED = StatusFilter(approved_only=True)
SITEMAP_ELIGIBLE = StatusFilter(approved_only=True, slug_locked_only=True)
ANY_STATUS = StatusFilter()


class EntityStore(Protocol):
    """Read-only access to the entity persistence layer."""

    def find_by_id(self, entity_type: EntityType, entity_id: str) -> Optional[Entity]:
        ...

    def find_many(self, entity_type: EntityType, status_filter: StatusFilter = ANY_STATUS) -> list[Entity]:
        ...


class InMemoryEntityStore:
    """
    EntityStore backed by a dictionary.

    Entities are kept per type in insertion order so that sitemap output and
    corpus scans are deterministic.
    """

    def __init__(self, entities: Optional[Iterable[Entity]] = None):
        self._entities: dict[EntityType, dict[str, Entity]] = {t: {} for t in EntityType}
        for entity in entities or []:
            self.add(entity)

    def add(self, entity: Entity) -> None:
        """Add or replace an entity."""
        self._entities[entity.entity_type][entity.id] = entity

    def find_by_id(self, entity_type: EntityType, entity_id: str) -> Optional[Entity]:
        return self._entities[entity_type].get(entity_id)

    def find_many(self, entity_type: EntityType, status_filter: StatusFilter = ANY_STATUS) -> list[Entity]:
        return [e for e in self._entities[entity_type].values() if status_filter.matches(e)]

    def ids(self, entity_type: EntityType) -> list[str]:
        """All ids of a type, in insertion order."""
        return list(self._entities[entity_type])

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._entities.values())


# =============================================================================
# JSON loading
# =============================================================================

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Export keys that differ from our field names
_KEY_ALIASES = {
    "_id": "id",
    "resume": "resume_url",
}


def _snake(key: str) -> str:
    key = _KEY_ALIASES.get(key, key)
    return _CAMEL_RE.sub("_", key).lower()


def _parse_entity_type(name: str) -> EntityType:
    normalized = name.strip().lower()
    if normalized.endswith("s") and normalized[:-1] in {t.value for t in EntityType}:
        normalized = normalized[:-1]
    try:
        return EntityType(normalized)
    except ValueError:
        raise EntityLoadError(f"Unknown entity type: {name}")


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise EntityLoadError(f"Invalid timestamp: {value}")


def _names(items: list[Any]) -> list[str]:
    return [s if isinstance(s, str) else s.get("name", "") for s in items or []]


def _treatment_refs(items: list[Any]) -> list[TreatmentRef]:
    refs = []
    for item in items or []:
        if isinstance(item, str):
            refs.append(TreatmentRef(main_treatment=item))
            continue
        data = {_snake(k): v for k, v in item.items()}
        refs.append(TreatmentRef(
            main_treatment=data.get("main_treatment", ""),
            sub_treatments=_names(data.get("sub_treatments", [])),
        ))
    return refs


def entity_from_dict(entity_type: EntityType, data: dict[str, Any]) -> Entity:
    """
    Build an entity from an exported record.

    Accepts camelCase or snake_case keys; unknown keys are ignored.

    Args:
        entity_type: Variant to build.
        data: Raw record.

    Returns:
        The entity.

    Raises:
        EntityLoadError: If the record has no id.
    """
    cls = ENTITY_CLASSES[entity_type]
    record = {_snake(k): v for k, v in data.items()}
    if "id" not in record:
        raise EntityLoadError(f"{entity_type.value} record without id: {data}")

    allowed = {f.name for f in fields(cls) if f.init}
    kwargs = {k: v for k, v in record.items() if k in allowed}
    kwargs["id"] = str(kwargs["id"])
    if "updated_at" in kwargs:
        kwargs["updated_at"] = _parse_datetime(kwargs["updated_at"])
    if "treatments" in kwargs:
        kwargs["treatments"] = _treatment_refs(kwargs["treatments"])
    if "subcategories" in kwargs:
        kwargs["subcategories"] = _names(kwargs["subcategories"])
    if cls is Doctor and isinstance(kwargs.get("user"), dict):
        user = {_snake(k): v for k, v in kwargs["user"].items()}
        kwargs["user"] = DoctorUser(
            name=user.get("name", ""),
            email=user.get("email", ""),
            is_approved=bool(user.get("is_approved", False)),
        )
    if cls is Doctor and kwargs.get("experience") not in (None, ""):
        try:
            kwargs["experience"] = float(kwargs["experience"])
        except (TypeError, ValueError):
            raise EntityLoadError(f"Invalid doctor experience: {kwargs['experience']}")
    elif cls is Doctor:
        kwargs["experience"] = None
    if cls is Blog and "paramlink" not in kwargs and record.get("slug"):
        kwargs["paramlink"] = record["slug"]
    return cls(**kwargs)


def load_entities_json(path: Union[str, Path]) -> InMemoryEntityStore:
    """
    Load an entity export into an in-memory store.

    The file maps type names (singular or plural) to lists of records:
    {"clinics": [...], "doctors": [...], "jobs": [...], ...}

    Args:
        path: Path to the JSON file.

    Returns:
        Populated InMemoryEntityStore.

    Raises:
        EntityLoadError: If the file is missing or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise EntityLoadError(f"File not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EntityLoadError(f"Failed to read entity file: {e}")
    if not isinstance(payload, dict):
        raise EntityLoadError("Entity file must contain an object keyed by entity type")

    store = InMemoryEntityStore()
    for type_name, records in payload.items():
        entity_type = _parse_entity_type(type_name)
        for record in records:
            store.add(entity_from_dict(entity_type, record))
    return store
