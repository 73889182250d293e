"""Tests for the indexing decision engine."""

from unittest.mock import Mock

import pytest

from conftest import make_blog, make_clinic, make_doctor, make_job, make_treatment

from seo_indexing_pipeline.entity_store import InMemoryEntityStore
from seo_indexing_pipeline.indexing import (
    SLUG_REASON,
    THIN_CONTENT_WARNING,
    IndexingPolicyEngine,
)
from seo_indexing_pipeline.models import DoctorUser, EntityType, Priority


def _decide(entity, *peers):
    store = InMemoryEntityStore([entity, *peers])
    return IndexingPolicyEngine(store).decide(entity.entity_type, entity.id)


class TestGuards:
    """Tests for the ordered guards shared by profile types."""

    def test_not_found(self):
        """Test an unknown id is a noindex decision, not an error."""
        engine = IndexingPolicyEngine(InMemoryEntityStore())

        decision = engine.decide(EntityType.CLINIC, "missing")

        assert decision.should_index is False
        assert decision.reason == "Clinic not found"
        assert decision.priority == Priority.LOW

    def test_doctor_not_found_label(self):
        engine = IndexingPolicyEngine(InMemoryEntityStore())

        assert engine.decide(EntityType.DOCTOR, "x").reason == "Doctor profile not found"

    def test_not_approved(self):
        """Test unapproved clinics are never indexed."""
        decision = _decide(make_clinic(is_approved=False))

        assert decision.should_index is False
        assert decision.reason == "Clinic not approved"

    def test_doctor_approval_on_user(self):
        """Test doctor approval is read from the linked user."""
        doctor = make_doctor(user=DoctorUser(name="Asha Rao", email="a@example.com", is_approved=False))

        assert _decide(doctor).reason == "Doctor not approved"

    def test_job_status_must_be_approved(self):
        assert _decide(make_job(status="pending")).reason == "Job not approved"

    def test_missing_slug(self):
        """Test a missing slug blocks indexing."""
        decision = _decide(make_clinic(slug=None))

        assert decision.should_index is False
        assert decision.reason == SLUG_REASON

    def test_unlocked_slug_blocks_complete_entity(self):
        """Test an unlocked slug blocks even a complete, unique entity."""
        decision = _decide(make_clinic(slug_locked=False))

        assert decision.should_index is False
        assert decision.reason == SLUG_REASON

    def test_approval_checked_before_slug(self):
        """Test guards run in order: approval first."""
        decision = _decide(make_clinic(is_approved=False, slug=None))

        assert decision.reason == "Clinic not approved"


class TestProfileDecisions:
    """Tests for completeness, duplicate and thin-content outcomes."""

    def test_complete_clinic_indexed(self):
        decision = _decide(make_clinic())

        assert decision.should_index is True
        assert decision.reason == "Profile complete and unique"
        assert decision.priority == Priority.HIGH
        assert decision.warnings == []

    def test_clinic_missing_pricing(self):
        """Test a clinic without pricing is incomplete and not indexed."""
        decision = _decide(make_clinic(pricing=""))

        assert decision.should_index is False
        assert "Incomplete" in decision.reason
        assert decision.priority == Priority.LOW
        assert "Profile incomplete - missing required fields" in decision.warnings

    def test_clinic_without_treatments_incomplete(self):
        assert _decide(make_clinic(treatments=[])).should_index is False

    def test_doctor_missing_resume(self):
        decision = _decide(make_doctor(resume_url=""))

        assert decision.should_index is False
        assert decision.reason == "Incomplete profile"

    def test_complete_doctor_indexed(self):
        decision = _decide(make_doctor())

        assert decision.should_index is True
        assert decision.priority == Priority.HIGH

    def test_duplicate_only_downgrades_priority(self):
        """Test a duplicate that is not thin stays indexed at low priority."""
        decision = _decide(make_clinic(id="c1"), make_clinic(id="c2", slug="other"))

        assert decision.should_index is True
        assert decision.priority == Priority.LOW
        assert decision.warnings == ["Potential duplicate clinic name detected"]

    def test_thin_only_job_indexed_low(self):
        """Test a thin but unique job stays indexed at low priority."""
        decision = _decide(make_job(description="Assist the dentist with procedures."))

        assert decision.should_index is True
        assert decision.priority == Priority.LOW
        assert decision.warnings == ["Thin content detected - consider adding more job details"]

    def test_duplicate_and_thin_job_blocked(self):
        """Test duplicate plus thin content blocks indexing."""
        short = "Assist the dentist with procedures."
        decision = _decide(
            make_job(id="j1", description=short),
            make_job(id="j2", slug="other", description=short),
        )

        assert decision.should_index is False
        assert decision.reason == "Duplicate and thin content"
        assert decision.warnings == [
            "Potential duplicate job posting detected",
            "Thin content detected - consider adding more job details",
        ]

    def test_incomplete_job(self):
        decision = _decide(make_job(salary=""))

        assert decision.should_index is False
        assert decision.reason == "Incomplete job posting"

    def test_complete_job_indexed(self):
        decision = _decide(make_job())

        assert decision.reason == "Job posting complete and unique"
        assert decision.priority == Priority.HIGH


class TestTreatmentDecisions:
    """Treatments have no slug lock."""

    def test_unlocked_treatment_indexed(self):
        decision = _decide(make_treatment(slug_locked=False))

        assert decision.should_index is True
        assert decision.reason == "Treatment complete and unique"

    def test_treatment_without_slug(self):
        assert _decide(make_treatment(slug=None)).reason == SLUG_REASON

    def test_thin_treatment(self):
        decision = _decide(make_treatment(description="", subcategories=[]))

        assert decision.should_index is True
        assert decision.warnings == [THIN_CONTENT_WARNING]


class TestBlogDecisions:
    """Tests for the blog path."""

    def test_published_blog_indexed(self):
        decision = _decide(make_blog())

        assert decision.should_index is True
        assert decision.reason == "Blog published and complete"
        assert decision.priority == Priority.HIGH

    def test_draft_blog(self):
        assert _decide(make_blog(status="draft")).reason == "Blog not published"

    def test_blog_without_paramlink(self):
        assert _decide(make_blog(paramlink=None)).reason == SLUG_REASON

    def test_blog_short_content(self):
        assert _decide(make_blog(content="<p>Too short</p>")).reason == "Blog content too thin"

    def test_blog_short_title(self):
        assert _decide(make_blog(title="Whitening")).reason == "Blog content too thin"

    def test_blog_not_found(self):
        engine = IndexingPolicyEngine(InMemoryEntityStore())

        assert engine.decide(EntityType.BLOG, "b404").reason == "Blog not found"


class TestErrorHandling:
    """The engine never raises."""

    def test_store_error_becomes_decision(self):
        """Test a failing store yields a noindex decision with the error."""
        store = Mock()
        store.find_by_id.side_effect = RuntimeError("connection lost")

        decision = IndexingPolicyEngine(store).decide(EntityType.CLINIC, "c1")

        assert decision.should_index is False
        assert decision.reason == "Error: connection lost"
        assert decision.priority == Priority.LOW

    def test_detector_error_becomes_decision(self):
        """Test a failing duplicate detector yields an error decision."""
        detector = Mock()
        detector.check.side_effect = ValueError("bad corpus")
        store = InMemoryEntityStore([make_clinic()])

        decision = IndexingPolicyEngine(store, detector).decide(EntityType.CLINIC, "c1")

        assert decision.reason == "Error: bad corpus"


class TestIndexRequiresStableSlugAndApproval:
    """Indexed entities always have a stable slug and approval."""

    @pytest.mark.parametrize("entity", [
        make_clinic(),
        make_clinic(slug_locked=False),
        make_clinic(is_approved=False),
        make_doctor(),
        make_doctor(slug=None),
        make_job(),
        make_job(status="rejected"),
        make_blog(),
        make_blog(slug_locked=False),
        make_treatment(),
        make_treatment(slug=None),
        make_treatment(is_approved=False),
    ])
    def test_index_implies_slug_and_approval(self, entity):
        decision = _decide(entity)

        if decision.should_index:
            assert entity.has_slug
            assert entity.slug_locked or entity.entity_type == EntityType.TREATMENT
            assert entity.is_visible
