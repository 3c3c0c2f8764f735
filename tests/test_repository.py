"""Tests for both repository implementations."""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import Conflict
from app.db.repository import GuardedWrite, Gte, In, InMemoryRepository, OrderBy
from app.db.sql_repository import SqlRepository
from app.db.tables import metadata
from app.models.entities import (
    Application, ApplicationStatus, Internship, InternshipMembership, InternshipStatus, MembershipStatus, Profile,
    Role, Task, TaskStatus, new_id,
)

from conftest import NOW, TODAY


@pytest.fixture
def sql_repo() -> SqlRepository:
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    metadata.create_all(engine)
    yield SqlRepository(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        return InMemoryRepository()
    return request.getfixturevalue("sql_repo")


def _seed(store):
    employer = Profile(id=new_id(), role=Role.employer, full_name="Erin Employer", company_name="Acme Labs")
    student = Profile(id=new_id(), role=Role.student, full_name="Sam Student")
    store.insert(employer)
    store.insert(student)
    internship = Internship(
        id=new_id(), employer_id=employer.id, title="Backend Intern", status=InternshipStatus.published,
        vacancies=1, application_deadline=TODAY, start_date=date(2024, 2, 1), end_date=date(2024, 5, 1),
        skills_required=["Python"], created_at=NOW,
    )
    store.insert(internship)
    return employer, student, internship


def _task(internship, employer, student, title, due_date=None, status=TaskStatus.todo):
    return Task(
        id=new_id(), internship_id=internship.id, created_by=employer.id, assigned_to=student.id,
        title=title, status=status, due_date=due_date, created_at=NOW,
    )


class TestRepositoryContract:
    def test_fetch_by_id(self, store) -> None:
        employer, _, internship = _seed(store)
        fetched = store.fetch_by_id(Internship, internship.id)
        assert fetched.status == InternshipStatus.published
        assert fetched.skills_required == ["Python"]
        assert fetched.application_deadline == TODAY
        assert store.fetch_by_id(Profile, employer.id).role == Role.employer
        assert store.fetch_by_id(Internship, "missing") is None

    def test_predicates(self, store) -> None:
        employer, student, internship = _seed(store)
        for title, status in (("a", TaskStatus.todo), ("b", TaskStatus.review), ("c", TaskStatus.done)):
            store.insert(_task(internship, employer, student, title, status=status))

        open_tasks = store.fetch_by_predicate(Task, {"status": In([TaskStatus.todo, TaskStatus.review])})
        assert sorted(t.title for t in open_tasks) == ["a", "b"]
        assert store.count_by_predicate(Task, {"assigned_to": student.id}) == 3
        assert store.count_by_predicate(Task, {"status": TaskStatus.done}) == 1
        assert store.count_by_predicate(Internship, {"application_deadline": Gte(TODAY)}) == 1
        assert store.count_by_predicate(Internship, {"application_deadline": Gte(date(2024, 1, 16))}) == 0

    def test_ordering_nulls_last_with_limit(self, store) -> None:
        employer, student, internship = _seed(store)
        for title, due in (("undated", None), ("march", date(2024, 3, 1)), ("feb", date(2024, 2, 1))):
            store.insert(_task(internship, employer, student, title, due_date=due))

        ordered = store.fetch_by_predicate(Task, order_by=[OrderBy("due_date")])
        assert [t.title for t in ordered] == ["feb", "march", "undated"]

        latest_first = store.fetch_by_predicate(Task, order_by=[OrderBy("due_date", descending=True)], limit=2)
        assert [t.title for t in latest_first] == ["march", "feb"]

    def test_conditional_update(self, store) -> None:
        employer, student, internship = _seed(store)
        application = Application(
            id=new_id(), internship_id=internship.id, student_id=student.id,
            status=ApplicationStatus.pending, applied_at=NOW,
        )
        store.insert(application)

        updated = store.update_conditional(
            Application, application.id,
            {"status": ApplicationStatus.pending},
            {"status": ApplicationStatus.shortlisted, "reviewed_by": employer.id},
        )
        assert updated.status == ApplicationStatus.shortlisted
        assert updated.reviewed_by == employer.id

        stale = store.update_conditional(
            Application, application.id,
            {"status": ApplicationStatus.pending},
            {"status": ApplicationStatus.rejected},
        )
        assert stale is None
        assert store.fetch_by_id(Application, application.id).status == ApplicationStatus.shortlisted
        assert store.update_conditional(Application, "missing", {}, {"notes": "x"}) is None

    def test_conditional_update_on_null(self, store) -> None:
        employer, student, internship = _seed(store)
        task = _task(internship, employer, student, "leaf")
        store.insert(task)
        moved = store.update_conditional(Task, task.id, {"parent_task_id": None}, {"title": "renamed"})
        assert moved.title == "renamed"

    def test_duplicate_application_conflicts(self, store) -> None:
        _, student, internship = _seed(store)
        first, second = (
            Application(
                id=new_id(), internship_id=internship.id, student_id=student.id,
                status=ApplicationStatus.pending, applied_at=NOW,
            )
            for _ in range(2)
        )
        store.insert(first)
        with pytest.raises(Conflict):
            store.insert(second)
        assert store.count_by_predicate(Application) == 1

    def test_duplicate_id_conflicts(self, store) -> None:
        employer, _, _ = _seed(store)
        with pytest.raises(Conflict):
            store.insert(Profile(id=employer.id, role=Role.admin, full_name="Impostor"))

    def test_atomic_batch_applies_every_write(self, store) -> None:
        employer, student, internship = _seed(store)
        parent, child = _task(internship, employer, student, "parent"), _task(internship, employer, student, "child")
        store.insert(parent)
        store.insert(child)
        membership = InternshipMembership(
            id=new_id(), internship_id=internship.id, student_id=student.id,
            status=MembershipStatus.active, joined_at=NOW,
        )

        written = store.write_atomically(
            [
                GuardedWrite(Task, child.id, {"parent_task_id": None}, {"parent_task_id": parent.id}),
                GuardedWrite(Task, parent.id, {"parent_task_id": None}),
            ],
            [membership],
        )

        assert [t.id for t in written] == [child.id, parent.id]
        assert written[0].parent_task_id == parent.id
        assert store.count_by_predicate(InternshipMembership, {"student_id": student.id}) == 1

    def test_atomic_batch_with_stale_guard_applies_nothing(self, store) -> None:
        employer, student, internship = _seed(store)
        parent, child = _task(internship, employer, student, "parent"), _task(internship, employer, student, "child")
        store.insert(parent)
        store.insert(child)
        membership = InternshipMembership(
            id=new_id(), internship_id=internship.id, student_id=student.id,
            status=MembershipStatus.active, joined_at=NOW,
        )

        written = store.write_atomically(
            [
                GuardedWrite(Task, child.id, {"parent_task_id": None}, {"parent_task_id": parent.id}),
                GuardedWrite(Task, parent.id, {"parent_task_id": child.id}),
            ],
            [membership],
        )

        assert written is None
        assert store.fetch_by_id(Task, child.id).parent_task_id is None
        assert store.count_by_predicate(InternshipMembership) == 0
        assert store.write_atomically([GuardedWrite(Task, "missing", {}, {"title": "x"})]) is None

    def test_atomic_batch_rolls_back_on_duplicate_insert(self, store) -> None:
        employer, student, internship = _seed(store)
        application = Application(
            id=new_id(), internship_id=internship.id, student_id=student.id,
            status=ApplicationStatus.shortlisted, applied_at=NOW, reviewed_by=employer.id, reviewed_at=NOW,
        )
        store.insert(application)
        existing, duplicate = (
            InternshipMembership(
                id=new_id(), internship_id=internship.id, student_id=student.id,
                status=MembershipStatus.active, joined_at=NOW,
            )
            for _ in range(2)
        )
        store.insert(existing)

        with pytest.raises(Conflict):
            store.write_atomically(
                [GuardedWrite(
                    Application, application.id,
                    {"status": ApplicationStatus.shortlisted}, {"status": ApplicationStatus.accepted},
                )],
                [duplicate],
            )

        assert store.fetch_by_id(Application, application.id).status == ApplicationStatus.shortlisted
        assert [m.id for m in store.fetch_by_predicate(InternshipMembership)] == [existing.id]


class TestInMemoryIsolation:
    def test_returned_records_are_copies(self) -> None:
        store = InMemoryRepository()
        _, _, internship = _seed(store)
        fetched = store.fetch_by_id(Internship, internship.id)
        fetched.skills_required.append("Rust")
        assert store.fetch_by_id(Internship, internship.id).skills_required == ["Python"]
