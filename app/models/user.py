from datetime import datetime

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

ROLES = ("student", "instructor", "admin")


class User(Document):
    google_sub: Indexed(str, unique=True)
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "student"  # "student" | "instructor" | "admin"
    courses: list[PydanticObjectId] = Field(default_factory=list)
    course_progress: list[PydanticObjectId] = Field(default_factory=list)
    session_version: int = 0
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    class Settings:
        name = "users"
