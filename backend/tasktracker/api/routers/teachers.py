from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.db import get_db
from tasktracker.schemas import TeacherListResponse
from tasktracker.services.directory import AccountDirectory

router = APIRouter(prefix="/teachers", tags=["teachers"])


# public: the signup form uses this to offer a teacher choice
@router.get("", response_model=TeacherListResponse)
@router.get("/", response_model=TeacherListResponse, include_in_schema=False)
async def list_teachers(db: AsyncSession = Depends(get_db)):
    teachers = await AccountDirectory(db).list_teachers()
    return TeacherListResponse(teachers=teachers)
