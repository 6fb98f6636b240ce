from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ....application.dto import ClassInput, CourseInput
from ....application.use_cases.catalog import (
    CreateClass,
    CreateCourse,
    DeleteClass,
    DeleteCourse,
    GetCourse,
    SearchCourses,
    UpdateClass,
    UpdateCourse,
)
from ....domain.errors import DomainError
from ....infrastructure.cache import SEARCH_PATTERN, get_cache, search_key, set_cache, delete_cache_pattern
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ....infrastructure.repositories import ClassRepository, CourseRepository, UserRepository
from ..authz import CurrentUser, require_teacher
from ..errors import as_http
from ..schemas import ClassCreate, ClassOut, CourseCreate, CourseDetail, CourseOut

router = APIRouter(prefix="/api", tags=["catalog"])


def _course_input(payload: CourseCreate) -> CourseInput:
    return CourseInput(
        title=payload.title,
        description=payload.description,
        price=payload.price,
        image_url=payload.image_url,
    )


def _class_input(payload: ClassCreate) -> ClassInput:
    return ClassInput(**payload.model_dump())


@router.get("/courses", response_model=list[CourseOut])
def search_courses(
    q: str = Query("", max_length=255),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    cache_key = search_key(q, limit, offset)
    cached = get_cache(cache_key)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    rows = SearchCourses(CourseRepository(db)).execute(q, limit, offset)
    result = [CourseOut.model_validate(row) for row in rows]
    set_cache(cache_key, [r.model_dump() for r in result])
    return result


@router.post("/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    uc = CreateCourse(courses=CourseRepository(db), users=UserRepository(db))
    try:
        course = uc.execute(current.id, _course_input(payload))
    except DomainError as e:
        raise as_http(e)
    delete_cache_pattern(SEARCH_PATTERN)
    return course


@router.get("/courses/{course_id}", response_model=CourseDetail)
def get_course(
    course_id: int,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    try:
        course, classes = GetCourse(CourseRepository(db), ClassRepository(db)).execute(current.id, course_id)
    except DomainError as e:
        raise as_http(e)
    return CourseDetail(
        **CourseOut.model_validate(course).model_dump(),
        classes=[ClassOut.model_validate(c) for c in classes],
    )


@router.put("/courses/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    payload: CourseCreate,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    uc = UpdateCourse(courses=CourseRepository(db), users=UserRepository(db))
    try:
        course = uc.execute(current.id, course_id, _course_input(payload))
    except DomainError as e:
        raise as_http(e)
    delete_cache_pattern(SEARCH_PATTERN)
    return course


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    try:
        DeleteCourse(CourseRepository(db)).execute(current.id, course_id)
    except DomainError as e:
        raise as_http(e)
    delete_cache_pattern(SEARCH_PATTERN)


# --- classes

@router.post("/courses/{course_id}/classes", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    course_id: int,
    payload: ClassCreate,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    uc = CreateClass(courses=CourseRepository(db), classes=ClassRepository(db))
    try:
        return uc.execute(current.id, course_id, _class_input(payload))
    except DomainError as e:
        raise as_http(e)


@router.put("/classes/{class_id}", response_model=ClassOut)
def update_class(
    class_id: int,
    payload: ClassCreate,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    uc = UpdateClass(courses=CourseRepository(db), classes=ClassRepository(db))
    try:
        return uc.execute(current.id, class_id, _class_input(payload))
    except DomainError as e:
        raise as_http(e)


@router.delete("/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_class(
    class_id: int,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    try:
        DeleteClass(courses=CourseRepository(db), classes=ClassRepository(db)).execute(current.id, class_id)
    except DomainError as e:
        raise as_http(e)
