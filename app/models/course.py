from datetime import datetime

from beanie import Document, PydanticObjectId
from pydantic import Field


class Course(Document):
    course_name: str
    description: str = ""
    price: int  # major currency units (rupees)
    instructor: PydanticObjectId | None = None
    students_enrolled: list[PydanticObjectId] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "courses"
        indexes = [[("instructor", 1)], [("created_at", -1)]]
