"""
Pytest fixtures and configuration for SEO Indexing Pipeline tests.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from seo_indexing_pipeline.config import PipelineConfig
from seo_indexing_pipeline.entity_store import InMemoryEntityStore
from seo_indexing_pipeline.models import (
    Blog,
    Clinic,
    Doctor,
    DoctorUser,
    Job,
    Treatment,
    TreatmentRef,
)

UPDATED_AT = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


def make_clinic(**overrides) -> Clinic:
    """A complete, approved clinic with a locked slug."""
    values = dict(
        id="c1",
        slug="smile-dental-care",
        slug_locked=True,
        updated_at=UPDATED_AT,
        name="Smile Dental Care",
        address="Andheri West, Mumbai, Maharashtra",
        location="Mumbai",
        photos=["https://cdn.example.com/clinics/c1.jpg"],
        treatments=[
            TreatmentRef("Teeth Whitening", ["Laser Whitening"]),
            TreatmentRef("Root Canal"),
        ],
        pricing="500-2000 INR",
        timings="Mon-Sat 9am-7pm",
        services_name=["Dental"],
        is_approved=True,
    )
    values.update(overrides)
    return Clinic(**values)


def make_doctor(**overrides) -> Doctor:
    """A complete doctor profile with an approved user."""
    values = dict(
        id="d1",
        slug="dr-asha-rao",
        slug_locked=True,
        updated_at=UPDATED_AT,
        user=DoctorUser(name="Asha Rao", email="asha@example.com", is_approved=True),
        degree="MBBS, MD",
        experience=12.0,
        address="Bandra, Mumbai",
        location="Mumbai",
        treatments=[TreatmentRef("Dermatology"), TreatmentRef("Acne Treatment")],
        resume_url="https://cdn.example.com/resumes/d1.pdf",
        photos=["https://cdn.example.com/doctors/d1.jpg"],
        consultation_fee="800 INR",
        timings="Tue-Sun 10am-6pm",
    )
    values.update(overrides)
    return Doctor(**values)


def make_job(**overrides) -> Job:
    """A complete, approved job posting."""
    values = dict(
        id="j1",
        slug="dental-assistant-smile-dental-care",
        slug_locked=True,
        updated_at=UPDATED_AT,
        job_title="Dental Assistant",
        company_name="Smile Dental Care",
        location="Andheri West, Mumbai",
        description=(
            "Assist dentists during procedures, prepare treatment rooms, sterilize "
            "instruments and keep patient records up to date."
        ),
        department="Clinical",
        job_type="Full-time",
        salary="25000 INR/month",
        qualification="Diploma in Dental Assistance",
        status="approved",
        is_active=True,
    )
    values.update(overrides)
    return Job(**values)


def make_blog(**overrides) -> Blog:
    """A published blog post with a locked paramlink."""
    values = dict(
        id="b1",
        paramlink="caring-for-your-teeth-after-whitening",
        slug_locked=True,
        updated_at=UPDATED_AT,
        title="Caring for Your Teeth After Whitening",
        content=(
            "<p>Professional whitening lifts years of stains, but the results depend on "
            "what you do in the weeks that follow.</p>"
            "<h2>Why whitening fades</h2>"
            "<p>Enamel stays porous for a while after treatment and absorbs pigments.</p>"
            "<h3>Coffee and tea</h3>"
            "<p>Drink them through a straw or rinse with water right after.</p>"
        ),
        status="published",
        image="https://cdn.example.com/blogs/b1.jpg",
    )
    values.update(overrides)
    return Blog(**values)


def make_treatment(**overrides) -> Treatment:
    """An approved treatment node with subcategories."""
    values = dict(
        id="t1",
        slug="teeth-whitening",
        updated_at=UPDATED_AT,
        name="Teeth Whitening",
        description="Cosmetic procedures that lighten the colour of teeth.",
        subcategories=["Laser Whitening", "Home Whitening Kits"],
    )
    values.update(overrides)
    return Treatment(**values)


@pytest.fixture
def clinic() -> Clinic:
    return make_clinic()


@pytest.fixture
def doctor() -> Doctor:
    return make_doctor()


@pytest.fixture
def job() -> Job:
    return make_job()


@pytest.fixture
def blog() -> Blog:
    return make_blog()


@pytest.fixture
def treatment() -> Treatment:
    return make_treatment()


@pytest.fixture
def store(clinic, doctor, job, blog, treatment) -> InMemoryEntityStore:
    """Store with one healthy entity of each type plus unrelated peers."""
    return InMemoryEntityStore([
        clinic,
        make_clinic(
            id="c2",
            slug="city-ortho-clinic",
            name="City Ortho Clinic",
            address="Powai, Mumbai",
            treatments=[TreatmentRef("Knee Replacement")],
        ),
        doctor,
        job,
        blog,
        treatment,
    ])


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    """Offline config writing sitemaps into a scratch directory."""
    return PipelineConfig.for_testing(tmp_path / "public")


@pytest.fixture
def entities_json(tmp_path: Path) -> Path:
    """An entity export in the camelCase shape of the database documents."""
    payload = {
        "clinics": [
            {
                "_id": "c1",
                "name": "Smile Dental Care",
                "address": "Andheri West, Mumbai, Maharashtra",
                "location": "Mumbai",
                "photos": ["https://cdn.example.com/clinics/c1.jpg"],
                "treatments": [
                    {"mainTreatment": "Teeth Whitening", "subTreatments": [{"name": "Laser Whitening"}]},
                    {"mainTreatment": "Root Canal"},
                ],
                "pricing": "500-2000 INR",
                "timings": "Mon-Sat 9am-7pm",
                "servicesName": ["Dental"],
                "isApproved": True,
                "slug": "smile-dental-care",
                "slugLocked": True,
                "updatedAt": "2024-05-01T10:30:00Z",
            },
            {
                "_id": "c9",
                "name": "Pending Clinic",
                "address": "Thane",
                "isApproved": False,
            },
        ],
        "doctors": [
            {
                "_id": "d1",
                "user": {"name": "Asha Rao", "email": "asha@example.com", "isApproved": True},
                "degree": "MBBS, MD",
                "experience": "12",
                "address": "Bandra, Mumbai",
                "location": "Mumbai",
                "treatments": [{"mainTreatment": "Dermatology"}],
                "resume": "https://cdn.example.com/resumes/d1.pdf",
                "slug": "dr-asha-rao",
                "slugLocked": True,
            },
        ],
        "jobs": [
            {
                "_id": "j1",
                "jobTitle": "Dental Assistant",
                "companyName": "Smile Dental Care",
                "location": "Andheri West, Mumbai",
                "description": "Assist dentists during procedures and keep patient records up to date.",
                "department": "Clinical",
                "jobType": "Full-time",
                "salary": "25000 INR/month",
                "status": "approved",
                "isActive": True,
                "slug": "dental-assistant",
                "slugLocked": True,
            },
        ],
        "blogs": [
            {
                "_id": "b1",
                "title": "Caring for Your Teeth After Whitening",
                "content": "<p>" + "Whitening results last longer with good habits. " * 4 + "</p>",
                "paramlink": "caring-for-your-teeth",
                "status": "published",
                "slugLocked": True,
            },
        ],
        "treatments": [
            {"_id": "t1", "name": "Teeth Whitening", "slug": "teeth-whitening"},
        ],
    }
    path = tmp_path / "entities.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
