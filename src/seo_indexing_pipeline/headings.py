"""
Heading outline planning.

Builds a non-duplicating H1/H2/H3 outline per entity. H2 sections come from
a fixed, ordered list of structural conditions per type; when none applies
the type's default sections are used. Blog outlines are read from the
headings already present in the post markup.
"""

from typing import Callable, Iterable

from bs4 import BeautifulSoup

from .models import (
    Blog,
    Clinic,
    Doctor,
    Entity,
    EntityType,
    HeadingPlan,
    HeadingValidation,
    Treatment,
)

Condition = tuple[Callable[[Entity], bool], str]

H2_RULES: dict[EntityType, tuple[Condition, ...]] = {
    EntityType.CLINIC: (
        (lambda c: bool(c.treatments), "Our Treatments & Services"),
        (lambda c: bool(c.address), "Location & Contact"),
        (lambda c: bool(c.pricing), "Pricing & Consultation Fees"),
        (lambda c: bool(c.timings), "Operating Hours"),
    ),
    EntityType.DOCTOR: (
        (lambda d: bool(d.treatments), "Specializations & Treatments"),
        (lambda d: bool(d.degree or d.experience), "Qualifications & Experience"),
        (lambda d: bool(d.address), "Clinic Location"),
        (lambda d: bool(d.consultation_fee), "Consultation Fees"),
        (lambda d: bool(d.timings), "Availability"),
    ),
    EntityType.JOB: (
        (lambda j: bool(j.description), "Job Description"),
        (lambda j: bool(j.qualification), "Requirements & Qualifications"),
        (lambda j: bool(j.salary), "Salary & Benefits"),
        (lambda j: bool(j.company_name), "About the Company"),
        (lambda j: bool(j.location), "Job Location"),
    ),
    EntityType.TREATMENT: (
        (lambda t: bool(t.description), "About This Treatment"),
        (lambda t: bool(t.subcategories), "Related Treatments"),
    ),
}

DEFAULT_H2: dict[EntityType, tuple[str, ...]] = {
    EntityType.CLINIC: ("About Us", "Services", "Contact"),
    EntityType.DOCTOR: ("About the Doctor", "Services", "Contact"),
    EntityType.JOB: ("Job Overview", "Requirements", "How to Apply"),
    EntityType.BLOG: ("Introduction", "Main Content", "Conclusion"),
    EntityType.TREATMENT: ("Overview", "Benefits", "Find a Clinic"),
}


def _unique(items: Iterable[str], taken: set[str]) -> list[str]:
    """Drop blanks and case-insensitive repeats (including of `taken`)."""
    result = []
    for item in items:
        text = (item or "").strip()
        key = text.lower()
        if not text or key in taken:
            continue
        taken.add(key)
        result.append(text)
    return result


def extract_blog_headings(markup: str) -> tuple[list[str], list[str]]:
    """
    Read <h2> and <h3> texts from blog markup, in document order.

    Args:
        markup: HTML content of the post.

    Returns:
        (h2 texts, h3 texts)
    """
    if not markup:
        return [], []
    soup = BeautifulSoup(markup, "html.parser")
    h2 = [tag.get_text(" ", strip=True) for tag in soup.find_all("h2")]
    h3 = [tag.get_text(" ", strip=True) for tag in soup.find_all("h3")]
    return h2, h3


def _primary_heading(entity: Entity) -> str:
    return entity.display_name.strip()


def _h3_candidates(entity_type: EntityType, entity: Entity) -> list[str]:
    if isinstance(entity, (Clinic, Doctor)):
        return [t.main_treatment for t in entity.treatments]
    if isinstance(entity, Treatment):
        return list(entity.subcategories)
    return []


def plan_headings(entity_type: EntityType, entity: Entity) -> HeadingPlan:
    """
    Build the heading outline of an entity page.

    Args:
        entity_type: Type of the entity.
        entity: The entity.

    Returns:
        HeadingPlan whose H2/H3 never repeat the H1 or each other.
    """
    h1 = _primary_heading(entity)
    taken = {h1.lower()} if h1 else set()

    if entity_type == EntityType.BLOG:
        h2_found, h3_found = extract_blog_headings(entity.content if isinstance(entity, Blog) else "")
        h2 = _unique(h2_found, taken) or _unique(DEFAULT_H2[EntityType.BLOG], taken)
        h3 = _unique(h3_found, taken)
        return HeadingPlan(h1=h1, h2=h2, h3=h3)

    matched = [heading for condition, heading in H2_RULES[entity_type] if condition(entity)]
    h2 = _unique(matched or DEFAULT_H2[entity_type], taken)
    h3 = _unique(_h3_candidates(entity_type, entity), taken)
    return HeadingPlan(h1=h1, h2=h2, h3=h3)


def validate_headings(plan: HeadingPlan) -> HeadingValidation:
    """
    Validate a heading plan.

    A plan is valid when it has a non-empty H1. Missing H2 sections only
    produce a warning.
    """
    errors = []
    warnings = []
    if not plan.h1 or not plan.h1.strip():
        errors.append("H1 heading is required")
    if not plan.h2:
        warnings.append("No H2 headings - add at least one section heading")
    return HeadingValidation(valid=not errors, errors=errors, warnings=warnings)
