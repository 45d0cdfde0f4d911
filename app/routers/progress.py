from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.deps import get_current_user
from app.models.user import User
from app.services import progress as progress_service

router = APIRouter()


class CompleteVideoRequest(BaseModel):
    video_id: str


@router.get("/{course_id}")
async def get_progress(course_id: str, user: User = Depends(get_current_user)):
    """Current user's progress in an enrolled course."""
    progress = await progress_service.get_progress(user, course_id)
    return progress_service.progress_out(progress)


@router.post("/{course_id}/videos")
async def complete_video(course_id: str, body: CompleteVideoRequest, user: User = Depends(get_current_user)):
    progress = await progress_service.mark_video_completed(user, course_id, body.video_id)
    return progress_service.progress_out(progress)
