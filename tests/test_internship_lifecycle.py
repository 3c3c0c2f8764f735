"""Tests for posting, editing, publishing and listing internships."""

from datetime import timedelta

import pytest

from app.core.errors import InvalidTransition, NotFound, PermissionDenied, ValidationError
from app.models.entities import InternshipStatus
from app.services.internship_service import (
    close_internship, create_internship, get_internship, list_employer_internships, list_open_internships,
    publish_internship, transition_internship, update_internship,
)
from app.services.state_machines import INTERNSHIP_TRANSITIONS

from conftest import NOW, TODAY

SCHEDULE = dict(
    application_deadline=TODAY + timedelta(days=10),
    start_date=TODAY + timedelta(days=20),
    end_date=TODAY + timedelta(days=80),
)


class TestCreateInternship:
    def test_employer_posts_draft(self, make_context, employer) -> None:
        internship = create_internship(
            make_context(employer), "Data Intern", skills_required=["SQL", " SQL ", "Python"], **SCHEDULE
        )
        assert internship.status == InternshipStatus.draft
        assert internship.employer_id == employer.id
        assert internship.skills_required == ["SQL", "Python"]
        assert internship.created_at == NOW

    def test_employer_cannot_post_for_someone_else(self, make_context, employer, other_employer) -> None:
        internship = create_internship(make_context(employer), "Mine", employer_id=other_employer.id, **SCHEDULE)
        assert internship.employer_id == employer.id

    def test_student_cannot_post(self, make_context, student) -> None:
        with pytest.raises(PermissionDenied):
            create_internship(make_context(student), "Nope", **SCHEDULE)

    def test_admin_posts_for_employer(self, make_context, admin, employer) -> None:
        internship = create_internship(make_context(admin), "On behalf", employer_id=employer.id, **SCHEDULE)
        assert internship.employer_id == employer.id

    def test_admin_must_name_an_employer(self, make_context, admin, student) -> None:
        with pytest.raises(ValidationError):
            create_internship(make_context(admin), "Nobody's", **SCHEDULE)
        with pytest.raises(ValidationError):
            create_internship(make_context(admin), "Student's", employer_id=student.id, **SCHEDULE)

    @pytest.mark.parametrize("overrides", [
        {"vacancies": 0},
        {"end_date": TODAY + timedelta(days=5)},
        {"application_deadline": TODAY + timedelta(days=30)},
        {"stipend": -10.0},
    ])
    def test_invalid_schedule(self, make_context, employer, overrides) -> None:
        fields = {**SCHEDULE, **overrides}
        with pytest.raises(ValidationError):
            create_internship(make_context(employer), "Broken", **fields)


class TestInternshipTransitions:
    @pytest.mark.parametrize("current", list(InternshipStatus))
    @pytest.mark.parametrize("target", list(InternshipStatus))
    def test_transition_table(self, make_context, employer, make_internship, current, target) -> None:
        internship = make_internship(employer.id, status=current)
        ctx = make_context(employer)
        if target in INTERNSHIP_TRANSITIONS[current]:
            assert transition_internship(ctx, internship.id, target).status == target
        else:
            with pytest.raises(InvalidTransition):
                transition_internship(ctx, internship.id, target)

    def test_publish_then_close(self, make_context, employer, make_internship) -> None:
        internship = make_internship(employer.id, status=InternshipStatus.draft)
        ctx = make_context(employer)
        assert publish_internship(ctx, internship.id).status == InternshipStatus.published
        assert close_internship(ctx, internship.id).status == InternshipStatus.closed

    def test_other_employer_cannot_close(self, make_context, employer, other_employer, make_internship) -> None:
        internship = make_internship(employer.id)
        with pytest.raises(PermissionDenied):
            close_internship(make_context(other_employer), internship.id)


class TestUpdateInternship:
    def test_owner_edits(self, make_context, employer, make_internship) -> None:
        internship = make_internship(employer.id)
        updated = update_internship(make_context(employer), internship.id, {"title": "Senior Backend Intern", "vacancies": 4})
        assert updated.title == "Senior Backend Intern"
        assert updated.vacancies == 4

    def test_status_not_editable(self, make_context, employer, make_internship) -> None:
        internship = make_internship(employer.id)
        with pytest.raises(ValidationError):
            update_internship(make_context(employer), internship.id, {"status": "closed"})

    def test_closed_not_editable(self, make_context, employer, make_internship) -> None:
        internship = make_internship(employer.id, status=InternshipStatus.closed)
        with pytest.raises(InvalidTransition):
            update_internship(make_context(employer), internship.id, {"title": "Reopened?"})

    def test_schedule_revalidated(self, make_context, employer, make_internship) -> None:
        internship = make_internship(employer.id)
        with pytest.raises(ValidationError):
            update_internship(make_context(employer), internship.id, {"end_date": TODAY})

    def test_other_employer_denied(self, make_context, employer, other_employer, make_internship) -> None:
        internship = make_internship(employer.id)
        with pytest.raises(PermissionDenied):
            update_internship(make_context(other_employer), internship.id, {"title": "Hijacked"})


class TestReadInternships:
    def test_draft_hidden_from_students(self, make_context, employer, student, make_internship) -> None:
        draft = make_internship(employer.id, status=InternshipStatus.draft)
        with pytest.raises(NotFound):
            get_internship(make_context(student), draft.id)
        assert get_internship(make_context(employer), draft.id).id == draft.id

    def test_open_list_filters_status_and_deadline(self, make_context, employer, student, make_internship) -> None:
        open_one = make_internship(employer.id)
        make_internship(employer.id, status=InternshipStatus.draft)
        make_internship(employer.id, status=InternshipStatus.closed)
        make_internship(employer.id, deadline=TODAY - timedelta(days=1))
        assert [i.id for i in list_open_internships(make_context(student))] == [open_one.id]

    def test_open_list_newest_first(self, make_context, employer, student, make_internship) -> None:
        older = make_internship(employer.id, created_at=NOW - timedelta(days=3))
        newer = make_internship(employer.id, created_at=NOW - timedelta(days=1))
        assert [i.id for i in list_open_internships(make_context(student))] == [newer.id, older.id]

    @pytest.mark.parametrize("term", ["backend", "APIS", "acme", "sql"])
    def test_search(self, make_context, employer, other_employer, student, make_internship, term) -> None:
        match = make_internship(employer.id)
        make_internship(other_employer.id, title="Design Intern", skills=("Figma",), description="Mockups")
        assert [i.id for i in list_open_internships(make_context(student), search=term)] == [match.id]

    def test_skill_filter_matches_any(self, make_context, employer, student, make_internship) -> None:
        python = make_internship(employer.id, skills=("Python",))
        make_internship(employer.id, skills=("Go",))
        figma = make_internship(employer.id, skills=("Figma",))
        found = {i.id for i in list_open_internships(make_context(student), skills=["Python", "Figma"])}
        assert found == {python.id, figma.id}

    def test_employer_lists_own(self, make_context, employer, other_employer, make_internship) -> None:
        mine = make_internship(employer.id, status=InternshipStatus.draft)
        make_internship(other_employer.id)
        assert [i.id for i in list_employer_internships(make_context(employer))] == [mine.id]

    def test_employer_cannot_list_another(self, make_context, employer, other_employer) -> None:
        with pytest.raises(PermissionDenied):
            list_employer_internships(make_context(employer), employer_id=other_employer.id)

    def test_admin_lists_any_employer(self, make_context, admin, employer, make_internship) -> None:
        theirs = make_internship(employer.id)
        assert [i.id for i in list_employer_internships(make_context(admin), employer_id=employer.id)] == [theirs.id]

    def test_student_cannot_list_employer_internships(self, make_context, employer, student) -> None:
        with pytest.raises(PermissionDenied):
            list_employer_internships(make_context(student), employer_id=employer.id)
