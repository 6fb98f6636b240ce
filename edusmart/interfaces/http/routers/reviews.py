from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.dto import ReviewInput
from ....application.use_cases.reviews import RatingSummary, SubmitReview
from ....domain.errors import DomainError
from ....infrastructure.cache import (
    course_rating_key,
    delete_cache,
    get_cache,
    set_cache,
    teacher_rating_key,
)
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ....infrastructure.repositories import CourseRepository, ReviewRepository, UserRepository
from ..authz import CurrentUser, require_learner
from ..errors import as_http
from ..schemas import RatingOut, ReviewOut, ReviewReq

router = APIRouter(prefix="/api", tags=["reviews"])


def _summary(db: Session) -> RatingSummary:
    return RatingSummary(reviews=ReviewRepository(db), courses=CourseRepository(db))


@router.post("/courses/{course_id}/reviews", response_model=ReviewOut)
def submit_review(
    course_id: int,
    payload: ReviewReq,
    current: CurrentUser = Depends(require_learner),
    db: Session = Depends(get_db),
):
    uc = SubmitReview(reviews=ReviewRepository(db), courses=CourseRepository(db), users=UserRepository(db))
    try:
        review = uc.execute(
            current.id,
            course_id,
            ReviewInput(payload.course_rating, payload.teacher_rating, payload.comment),
        )
    except DomainError as e:
        raise as_http(e)
    course = CourseRepository(db).get(course_id)
    delete_cache(course_rating_key(course_id))
    delete_cache(teacher_rating_key(course.teacher_id))
    return review


@router.get("/courses/{course_id}/reviews", response_model=list[ReviewOut])
def list_reviews(course_id: int, db: Session = Depends(get_db)):
    try:
        return _summary(db).list_reviews(course_id)
    except DomainError as e:
        raise as_http(e)


@router.get("/courses/{course_id}/rating", response_model=RatingOut)
def course_rating(course_id: int, db: Session = Depends(get_db)):
    cache_key = course_rating_key(course_id)
    cached = get_cache(cache_key)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    try:
        average, count = _summary(db).for_course(course_id)
    except DomainError as e:
        raise as_http(e)
    result = RatingOut(average=average, count=count)
    set_cache(cache_key, result.model_dump())
    return result


@router.get("/teachers/{teacher_id}/rating", response_model=RatingOut)
def teacher_rating(teacher_id: int, db: Session = Depends(get_db)):
    cache_key = teacher_rating_key(teacher_id)
    cached = get_cache(cache_key)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    average, count = _summary(db).for_teacher(teacher_id)
    result = RatingOut(average=average, count=count)
    set_cache(cache_key, result.model_dump())
    return result
