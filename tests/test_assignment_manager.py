"""Assignments inside modules: authoring, student submissions, and grading."""

from datetime import datetime, timedelta

import pytest
import pytz

from eduhub.core.exceptions import (
    AssignmentNotFoundError,
    LearningModuleNotFoundError,
    PermissionDeniedError,
    SubmissionNotFoundError,
    ValidationError,
)
from eduhub.models import (
    AssignmentModel,
    AssignmentStatus,
    EnrollmentStatus,
    ModuleModel,
    Role,
    SubmissionModel,
    SubmissionStatus,
)
from eduhub.schemas.assignment import AssignmentInfo, SubmissionDetail


def _in_days(days):
    return datetime.now(pytz.utc) + timedelta(days=days)


@pytest.fixture
def teacher(make_user):
    return make_user(Role.TEACHER)


@pytest.fixture
def course(make_module, teacher):
    return make_module("Algorithms", teacher_id=teacher.user_id)


@pytest.fixture
def homework(assignments, teacher, course):
    return assignments.create_assignment(
        teacher, course.module_id, "Sorting", _in_days(7), description="Implement mergesort"
    )


def test_teacher_creates_assignment_in_own_module(assignments, teacher, course):
    due = _in_days(3)

    created = assignments.create_assignment(
        teacher, course.module_id, "  Graphs  ", due, status="PUBLISHED"
    )

    assert created.title == "Graphs"
    assert created.status == AssignmentStatus.PUBLISHED
    assert created.due_date.replace(tzinfo=None) == due.replace(tzinfo=None)
    assert [a.id for a in assignments.list_for_module(course.module_id)] == [created.id]
    info = AssignmentInfo.model_validate(created)
    assert info.module_id == course.module_id


def test_new_assignment_defaults_to_draft(assignments, homework):
    assert homework.status == AssignmentStatus.DRAFT
    assert homework.description == "Implement mergesort"


def test_admin_may_author_in_any_module(assignments, make_user, course):
    admin = make_user(Role.ADMIN)
    created = assignments.create_assignment(admin, course.module_id, "Quiz", _in_days(1))
    assert created.module_id == course.module_id


@pytest.mark.parametrize("role", [Role.TEACHER, Role.STUDENT])
def test_non_owner_cannot_author(db, assignments, make_user, course, role):
    outsider = make_user(role)

    with pytest.raises(PermissionDeniedError):
        assignments.create_assignment(outsider, course.module_id, "Quiz", _in_days(1))
    assert db.query(AssignmentModel).count() == 0


def test_create_in_unknown_module(assignments, teacher):
    with pytest.raises(LearningModuleNotFoundError):
        assignments.create_assignment(teacher, "missing", "Quiz", _in_days(1))


@pytest.mark.parametrize(
    "title, due, status",
    [
        ("   ", _in_days(1), "DRAFT"),
        ("x" * 256, _in_days(1), "DRAFT"),
        ("Quiz", datetime(2000, 1, 1, 12, 0), "DRAFT"),
        ("Quiz", "tomorrow", "DRAFT"),
        ("Quiz", _in_days(1), "ARCHIVED"),
    ],
)
def test_create_validates_fields(db, assignments, teacher, course, title, due, status):
    with pytest.raises(ValidationError):
        assignments.create_assignment(teacher, course.module_id, title, due, status=status)
    assert db.query(AssignmentModel).count() == 0


def test_due_date_accepts_minute_precision_string(assignments, teacher, course):
    due = _in_days(10).strftime("%Y-%m-%d %H:%M")

    created = assignments.create_assignment(teacher, course.module_id, "Essay", due)

    assert created.due_date.strftime("%Y-%m-%d %H:%M") == due


def test_update_changes_only_given_fields(assignments, teacher, homework):
    updated = assignments.update_assignment(
        teacher, homework.id, title="Sorting II", status=AssignmentStatus.PUBLISHED
    )

    assert updated.title == "Sorting II"
    assert updated.status == AssignmentStatus.PUBLISHED
    assert updated.description == "Implement mergesort"


def test_invalid_update_writes_nothing(db, assignments, teacher, homework):
    with pytest.raises(ValidationError):
        assignments.update_assignment(teacher, homework.id, title="Renamed", status="bogus")

    db.expire_all()
    assert assignments.get_assignment(homework.id).title == "Sorting"


def test_other_teacher_cannot_update_or_delete(assignments, make_user, homework):
    other = make_user(Role.TEACHER)

    with pytest.raises(PermissionDeniedError):
        assignments.update_assignment(other, homework.id, title="Hijacked")
    with pytest.raises(PermissionDeniedError):
        assignments.delete_assignment(other, homework.id)


def test_list_for_module_filters_by_status(assignments, teacher, course, homework):
    published = assignments.create_assignment(
        teacher, course.module_id, "Trees", _in_days(14), status="PUBLISHED"
    )

    assert [a.id for a in assignments.list_for_module(course.module_id)] == [
        homework.id,
        published.id,
    ]
    assert [
        a.id for a in assignments.list_for_module(course.module_id, AssignmentStatus.PUBLISHED)
    ] == [published.id]


def test_enrolled_student_submits_and_resubmits(
    assignments, enrollments, make_student, course, homework
):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)

    first = assignments.submit(student.user_id, homework.id, "draft answer")
    first_id = first.id
    again = assignments.submit(student.user_id, homework.id, "final answer")

    assert again.id == first_id
    assert again.submission_text == "final answer"
    assert again.status == SubmissionStatus.SUBMITTED
    assert len(assignments.list_submissions(homework.id)) == 1


def test_resolved_enrollment_still_allows_submission(
    assignments, enrollments, make_student, course, homework
):
    student = make_student()
    enrollment = enrollments.enroll(student.user_id, course.module_id)
    enrollments.complete(enrollment.id, EnrollmentStatus.FAIL)

    submission = assignments.submit(student.user_id, homework.id, "late work")

    assert submission.user_id == student.user_id


def test_unenrolled_student_cannot_submit(db, assignments, make_student, homework):
    with pytest.raises(PermissionDeniedError):
        assignments.submit(make_student().user_id, homework.id, "answer")
    assert db.query(SubmissionModel).count() == 0


def test_blank_submission_rejected(assignments, enrollments, make_student, course, homework):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)

    with pytest.raises(ValidationError):
        assignments.submit(student.user_id, homework.id, "   ")


def test_submit_to_unknown_assignment(assignments, make_student):
    with pytest.raises(AssignmentNotFoundError):
        assignments.submit(make_student().user_id, 404, "answer")


def test_owner_grades_submission(assignments, enrollments, make_student, teacher, course, homework):
    student = make_student("ada")
    enrollments.enroll(student.user_id, course.module_id)
    submission = assignments.submit(student.user_id, homework.id, "answer")

    graded = assignments.grade_submission(teacher, submission.id, 87, feedback="Nice")

    assert graded.grade == 87
    assert graded.feedback == "Nice"
    assert graded.status == SubmissionStatus.GRADED
    assert graded.graded_at is not None
    (row,) = assignments.list_submissions(homework.id)
    assert SubmissionDetail.model_validate(row).student.username == "ada"


def test_resubmission_keeps_grade(assignments, enrollments, make_student, teacher, course, homework):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)
    submission = assignments.submit(student.user_id, homework.id, "answer")
    assignments.grade_submission(teacher, submission.id, 70)

    again = assignments.submit(student.user_id, homework.id, "improved answer")

    assert again.grade == 70
    assert again.submission_text == "improved answer"


@pytest.mark.parametrize("grade", [-1, 101, 50.5, "90", True])
def test_grade_must_be_integer_in_range(
    assignments, enrollments, make_student, teacher, course, homework, grade
):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)
    submission = assignments.submit(student.user_id, homework.id, "answer")

    with pytest.raises(ValidationError):
        assignments.grade_submission(teacher, submission.id, grade)
    assert assignments.get_submission(submission.id).status == SubmissionStatus.SUBMITTED


def test_only_module_owner_grades(assignments, enrollments, make_user, make_student, course, homework):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)
    submission = assignments.submit(student.user_id, homework.id, "answer")

    with pytest.raises(PermissionDeniedError):
        assignments.grade_submission(make_user(Role.TEACHER), submission.id, 100)
    with pytest.raises(PermissionDeniedError):
        assignments.grade_submission(student, submission.id, 100)
    with pytest.raises(SubmissionNotFoundError):
        assignments.grade_submission(make_user(Role.ADMIN), 404, 100)


def test_delete_assignment_removes_submissions(
    db, assignments, enrollments, make_student, teacher, course, homework
):
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)
    assignments.submit(student.user_id, homework.id, "answer")
    homework_id = homework.id

    assignments.delete_assignment(teacher, homework_id)

    with pytest.raises(AssignmentNotFoundError):
        assignments.get_assignment(homework_id)
    assert db.query(SubmissionModel).count() == 0


def test_deleting_teacher_account_removes_module_assignments(
    db, users, assignments, enrollments, make_user, make_student, teacher, course, homework
):
    admin = make_user(Role.ADMIN)
    student = make_student()
    enrollments.enroll(student.user_id, course.module_id)
    assignments.submit(student.user_id, homework.id, "answer")
    teacher_id = teacher.user_id

    users.delete_user(admin.user_id, teacher_id)

    assert db.query(ModuleModel).count() == 0
    assert db.query(AssignmentModel).count() == 0
    assert db.query(SubmissionModel).count() == 0


def test_deleting_student_removes_their_submissions(
    db, users, assignments, enrollments, make_user, make_student, course, homework
):
    admin = make_user(Role.ADMIN)
    leaver = make_student()
    stayer = make_student()
    for student in (leaver, stayer):
        enrollments.enroll(student.user_id, course.module_id)
        assignments.submit(student.user_id, homework.id, "answer")
    stayer_id = stayer.user_id

    users.delete_user(admin.user_id, leaver.user_id)

    assert [s.user_id for s in db.query(SubmissionModel).all()] == [stayer_id]
