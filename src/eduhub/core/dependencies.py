"""Dependency injection module for FastAPI.

This module provides request-scoped managers to a presentation layer built on
FastAPI. Each manager shares the request's database session, so an enrollment
write and the role reconciliation it triggers commit together.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from eduhub.core.database import get_db
from eduhub.utils import assignment_manager
from eduhub.utils import enrollment_manager
from eduhub.utils import module_manager
from eduhub.utils import role_transition
from eduhub.utils import stats_manager
from eduhub.utils import user_manager


def get_role_transition_engine(
    db: Session = Depends(get_db),
) -> role_transition.RoleTransitionEngine:
    """Get RoleTransitionEngine instance with request-scoped DB session."""
    return role_transition.RoleTransitionEngine(db)


def get_enrollment_manager(
    db: Session = Depends(get_db),
    engine: role_transition.RoleTransitionEngine = Depends(get_role_transition_engine),
) -> enrollment_manager.EnrollmentManager:
    """Get EnrollmentManager instance with request-scoped DB session.

    Args:
        db: Database session.
        engine: Role transition engine bound to the same session.

    Returns:
        EnrollmentManager instance.
    """
    return enrollment_manager.EnrollmentManager(db, role_transitions=engine)


def get_module_manager(db: Session = Depends(get_db)) -> module_manager.ModuleManager:
    """Get ModuleManager instance with request-scoped DB session."""
    return module_manager.ModuleManager(db)


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_assignment_manager(
    db: Session = Depends(get_db),
) -> assignment_manager.AssignmentManager:
    """Get AssignmentManager instance with request-scoped DB session."""
    return assignment_manager.AssignmentManager(db)


def get_stats_manager(db: Session = Depends(get_db)) -> stats_manager.StatsManager:
    """Get StatsManager instance with request-scoped DB session."""
    return stats_manager.StatsManager(db)


# Type aliases for dependency injection
RoleTransitionEngineDep = Annotated[
    role_transition.RoleTransitionEngine, Depends(get_role_transition_engine)
]
EnrollmentManagerDep = Annotated[
    enrollment_manager.EnrollmentManager, Depends(get_enrollment_manager)
]
ModuleManagerDep = Annotated[
    module_manager.ModuleManager, Depends(get_module_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
StatsManagerDep = Annotated[
    stats_manager.StatsManager, Depends(get_stats_manager)
]
AssignmentManagerDep = Annotated[
    assignment_manager.AssignmentManager, Depends(get_assignment_manager)
]
