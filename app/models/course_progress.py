from datetime import datetime

import pymongo
from beanie import Document, PydanticObjectId
from pydantic import Field
from pymongo import IndexModel


class CourseProgress(Document):
    """One per (course, user) enrollment; tracks completed videos."""
    course_id: PydanticObjectId
    user_id: PydanticObjectId
    completed_videos: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "course_progress"
        indexes = [
            IndexModel(
                [("course_id", pymongo.ASCENDING), ("user_id", pymongo.ASCENDING)],
                unique=True,
                name="course_user_unique",
            ),
            [("user_id", 1)],
        ]
