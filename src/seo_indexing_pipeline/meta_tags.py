"""
Meta tag composition.

Dynamic, template-driven titles and descriptions per entity type:
- Fixed field-concatenation templates (no keyword stuffing)
- Hard length budgets: 60 characters for titles, 160 for descriptions
- Lowercase, deduplicated keywords that always carry the type's category terms
"""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from .config import PipelineConfig
from .models import Blog, Clinic, Doctor, Entity, EntityType, Job, MetaTags, Treatment

ELLIPSIS = "..."

CATEGORY_KEYWORDS: dict[EntityType, tuple[str, ...]] = {
    EntityType.CLINIC: ("healthcare", "clinic", "appointment", "verified"),
    EntityType.DOCTOR: ("doctor", "physician", "appointment", "healthcare"),
    EntityType.JOB: ("job", "career", "hiring", "employment", "opportunity"),
    EntityType.BLOG: ("blog",),
    EntityType.TREATMENT: ("treatment", "healthcare"),
}

MAX_BLOG_KEYWORDS = 10


def truncate(text: str, max_length: int) -> str:
    """
    Truncate text to a length budget.

    Text longer than max_length is cut to max_length - 3 characters and
    "..." is appended, so the result is exactly max_length long.

    Args:
        text: Text to truncate.
        max_length: Length budget.

    Returns:
        Text no longer than max_length.
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(ELLIPSIS)] + ELLIPSIS


def first_segment(address: str) -> str:
    """City/area part of an address (text before the first comma)."""
    return address.split(",")[0].strip()


def strip_html(markup: str) -> str:
    """Plain text of an HTML fragment."""
    if not markup:
        return ""
    return BeautifulSoup(markup, "html.parser").get_text().strip()


def build_keywords(values: Iterable[Optional[str]], category_terms: Iterable[str]) -> list[str]:
    """
    Lowercase and deduplicate keywords, keeping first-seen order.

    Args:
        values: Entity-derived keywords (blank values are skipped).
        category_terms: Fixed terms appended for the entity type.

    Returns:
        Deduplicated keyword list.
    """
    cleaned = (v.strip().lower() for v in [*values, *category_terms] if v and v.strip())
    return list(dict.fromkeys(cleaned))


def _address_parts(address: str) -> list[str]:
    return [p.strip() for p in address.split(",")] if address else []


class MetaTagComposer:
    """Composes MetaTags for every entity type."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    @property
    def title_max(self) -> int:
        return self.config.title_max_length

    @property
    def description_max(self) -> int:
        return self.config.description_max_length

    def compose(self, entity_type: EntityType, entity: Entity) -> MetaTags:
        """
        Compose meta tags for an entity.

        Args:
            entity_type: Type of the entity.
            entity: The entity.

        Returns:
            MetaTags within the configured length budgets.
        """
        builders = {
            EntityType.CLINIC: self._clinic,
            EntityType.DOCTOR: self._doctor,
            EntityType.JOB: self._job,
            EntityType.BLOG: self._blog,
            EntityType.TREATMENT: self._treatment,
        }
        return builders[entity_type](entity)

    def _finish(
        self,
        title: str,
        description: str,
        keywords: list[str],
        og_image: Optional[str] = None,
    ) -> MetaTags:
        title = truncate(title, self.title_max)
        description = truncate(description, self.description_max)
        return MetaTags(
            title=title,
            description=description,
            keywords=keywords,
            og_title=title,
            og_description=description,
            og_image=og_image or None,
        )

    def _clinic(self, clinic: Clinic) -> MetaTags:
        name = clinic.name or "Clinic"
        address = clinic.address or ""
        treatments = [t.main_treatment for t in clinic.treatments if t.main_treatment]

        title = name
        if address:
            title = f"{name} in {first_segment(address)}"

        description = name
        if treatments:
            description += f" offers {', '.join(treatments)}"
        if address:
            description += f" in {address}"
        description += ". Book appointment online with verified healthcare providers."

        keywords = build_keywords(
            [name, *_address_parts(address), *treatments],
            CATEGORY_KEYWORDS[EntityType.CLINIC],
        )
        return self._finish(title, description, keywords, clinic.photos[0] if clinic.photos else None)

    def _doctor(self, doctor: Doctor) -> MetaTags:
        name = doctor.display_name or "Doctor"
        degree = doctor.degree or ""
        address = doctor.address or ""
        specialization = doctor.treatments[0].main_treatment if doctor.treatments else ""

        title = f"Dr. {name}"
        if degree:
            title += f" - {degree}"
        if address:
            title += f" in {first_segment(address)}"

        description = f"Dr. {name}"
        if degree:
            description += f" ({degree})"
        if specialization:
            description += f" specializes in {specialization}"
        if address:
            description += f" in {address}"
        if doctor.experience:
            description += f" with {doctor.experience:g} years of experience"
        description += ". Book appointment online."

        keywords = build_keywords(
            [name, degree, *_address_parts(address), specialization],
            CATEGORY_KEYWORDS[EntityType.DOCTOR],
        )
        return self._finish(title, description, keywords, doctor.photos[0] if doctor.photos else None)

    def _job(self, job: Job) -> MetaTags:
        job_title = job.job_title or "Job"
        company = job.company_name or ""
        location = job.location or ""

        title = job_title
        if company:
            title += f" at {company}"
        if location:
            title += f" in {first_segment(location)}"

        description = job_title
        if company:
            description += f" at {company}"
        if job.department:
            description += f" - {job.department}"
        if location:
            description += f" in {location}"
        if job.job_type:
            description += f" ({job.job_type})"
        if job.salary:
            description += f". Salary: {job.salary}"
        description += ". Apply now!"

        keywords = build_keywords(
            [job_title, company, *_address_parts(location), job.department, job.job_type],
            CATEGORY_KEYWORDS[EntityType.JOB],
        )
        return self._finish(title, description, keywords)

    def _blog(self, blog: Blog) -> MetaTags:
        title = blog.title or "Blog Post"
        plain_text = strip_html(blog.content)
        description = plain_text or "Read this blog post"

        title_words = re.findall(r"\b\w+\b", title.lower())
        content_words = re.findall(r"\b\w{4,}\b", plain_text.lower())
        keywords = list(dict.fromkeys([*title_words, *content_words[:5]]))[:MAX_BLOG_KEYWORDS]
        keywords = build_keywords(keywords, CATEGORY_KEYWORDS[EntityType.BLOG])

        return self._finish(title, description, keywords, blog.image)

    def _treatment(self, treatment: Treatment) -> MetaTags:
        name = treatment.name or "Treatment"
        subs = [s for s in treatment.subcategories if s]
        site = self.config.site_name

        title = name
        if subs:
            title += f" - {len(subs)} Sub-treatments"
        title += f" | {site}"

        description = f"Find {name}"
        if subs:
            description += f" and related sub-treatments like {', '.join(subs)}"
        description += f" at {site}."

        keywords = build_keywords([name, *subs], CATEGORY_KEYWORDS[EntityType.TREATMENT])
        return self._finish(title, description, keywords)
