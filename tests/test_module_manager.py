import pytest

from eduhub.core.exceptions import (
    LearningModuleNotFoundError,
    PermissionDeniedError,
    UserNotFoundError,
    ValidationError,
)
from eduhub.models import EnrollmentStatus, Role


def test_create_module_defaults(modules):
    module = modules.create_module("  Databases  ", description="SQL basics")

    assert module.name == "Databases"
    assert module.description == "SQL basics"
    assert module.is_active is True
    assert module.teacher_id is None
    assert len(module.module_id) == 16
    assert modules.get_module(module.module_id).name == "Databases"


def test_create_module_rejects_blank_name(modules):
    with pytest.raises(ValidationError):
        modules.create_module("   ")


def test_create_module_with_teacher(modules, make_user):
    teacher = make_user(Role.TEACHER)
    module = modules.create_module("Networks", teacher_id=teacher.user_id)

    assert module.teacher_id == teacher.user_id
    assert [m.module_id for m in modules.list_modules_for_teacher(teacher.user_id)] == [
        module.module_id
    ]


def test_get_unknown_module(modules):
    with pytest.raises(LearningModuleNotFoundError):
        modules.get_module("nope")


def test_archive_toggle_and_unarchive(modules, make_module):
    module = make_module()

    assert modules.archive(module.module_id).is_active is False
    assert modules.list_active_modules() == []
    assert modules.toggle_active(module.module_id).is_active is True
    assert modules.toggle_active(module.module_id).is_active is False
    assert modules.unarchive(module.module_id).is_active is True
    assert [m.module_id for m in modules.list_active_modules()] == [module.module_id]


def test_archive_keeps_existing_enrollments(modules, enrollments, make_student, make_module):
    module = make_module()
    enrollment = enrollments.enroll(make_student().user_id, module.module_id)

    modules.archive(module.module_id)

    assert [e.id for e in enrollments.list_module_active(module.module_id)] == [enrollment.id]
    assert enrollments.complete(enrollment.id, EnrollmentStatus.PASS).status == EnrollmentStatus.PASS


def test_assign_teacher_requires_teacher_role(modules, make_user, make_module):
    module = make_module()
    student = make_user(Role.STUDENT)
    teacher = make_user(Role.TEACHER)

    with pytest.raises(PermissionDeniedError):
        modules.assign_teacher(module.module_id, student.user_id)
    with pytest.raises(UserNotFoundError):
        modules.assign_teacher(module.module_id, "ghost")

    assert modules.assign_teacher(module.module_id, teacher.user_id).teacher_id == teacher.user_id


def test_module_overview(modules, enrollments, users, make_user, make_student, make_module):
    teacher = users.create_user("grace", role=Role.TEACHER, display_name="Grace Hopper")
    taught = make_module("Compilers", teacher_id=teacher.user_id)
    orphan = make_module("Ethics", is_active=False)
    for _ in range(2):
        enrollments.enroll(make_student().user_id, taught.module_id)

    overview = {row["module_id"]: row for row in modules.module_overview()}

    assert overview[taught.module_id]["teacher_name"] == "Grace Hopper"
    assert overview[taught.module_id]["student_count"] == 2
    assert overview[taught.module_id]["is_active"] is True
    assert overview[orphan.module_id]["teacher_name"] == "Unassigned"
    assert overview[orphan.module_id]["teacher_email"] is None
    assert overview[orphan.module_id]["student_count"] == 0
    assert overview[orphan.module_id]["is_active"] is False
