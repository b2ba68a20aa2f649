from pydantic import BaseModel, ConfigDict, Field


class AdminStats(BaseModel):
    """System-wide counters for the admin dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(alias="totalUsers")
    active_users: int = Field(
        alias="activeUsers", description="Users whose role is not OLD_STUDENT."
    )
    active_modules: int = Field(alias="activeModules")
    total_enrollments: int = Field(alias="totalEnrollments")
    active_teachers: int = Field(alias="activeTeachers")
    completion_rate: float = Field(
        alias="completionRate",
        description="Percentage of enrollments resolved as PASS or FAIL, 2 decimals.",
    )
