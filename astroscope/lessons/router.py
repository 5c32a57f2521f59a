"""
FastAPI endpoints for the lesson corpus.

GET /lessons/search - Ranked keyword search
GET /lessons/{lesson_id} - Citation follow-through (full record + canonical URL)
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from astroscope.config import MAX_TOP_K
from astroscope.errors import EmptyQueryError
from astroscope.lessons.schemas import Lesson, format_lesson_detail
from astroscope.services import AppServices, get_services

router = APIRouter(prefix="/lessons", tags=["lessons"])


class LessonOut(BaseModel):
    id: int
    title: str
    abstract: str
    driving_event: str
    lesson_text: str
    recommendation: str
    mission: str
    center: str
    primary_subject: str
    secondary_subjects: List[str]
    llis_url: str

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> "LessonOut":
        return cls(**lesson.to_dict(), llis_url=lesson.llis_url)


class SearchResponse(BaseModel):
    query: str
    total: int
    lessons: List[LessonOut]


class LessonDetailResponse(BaseModel):
    lesson: LessonOut
    detail_markdown: str


@router.get("/search", response_model=SearchResponse)
def search_lessons(
    q: str = Query(..., description="Free-text query"),
    limit: int = Query(5, ge=1, le=MAX_TOP_K),
    services: AppServices = Depends(get_services),
):
    """Search the corpus. Empty results are a normal outcome."""
    try:
        lessons = services.corpus.search(q, top_k=limit)
    except EmptyQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SearchResponse(
        query=q,
        total=len(lessons),
        lessons=[LessonOut.from_lesson(l) for l in lessons],
    )


@router.get("/{lesson_id}", response_model=LessonDetailResponse)
def get_lesson(lesson_id: int, services: AppServices = Depends(get_services)):
    """Resolve a cited lesson id to its full record."""
    lesson = services.corpus.get_by_id(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail=f"Lesson {lesson_id} not found")

    return LessonDetailResponse(
        lesson=LessonOut.from_lesson(lesson),
        detail_markdown=format_lesson_detail(lesson),
    )
