"""Catalog service and router (stores mocked)."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from beanie import PydanticObjectId

from app.core.exceptions import BadRequestError, NotFoundError


def test_parse_object_id():
    from app.services.courses import parse_object_id

    oid = PydanticObjectId()
    assert parse_object_id(oid) is oid
    assert parse_object_id(str(oid)) == oid
    assert parse_object_id("xyz") is None
    assert parse_object_id(None) is None


@pytest.mark.asyncio
async def test_create_course_sets_instructor(user_factory):
    from app.services import courses as courses_service

    instructor = user_factory()
    instructor.role = "instructor"
    doc = MagicMock()
    doc.insert = AsyncMock()
    course_cls = MagicMock(return_value=doc)

    with patch("app.services.courses.Course", course_cls):
        out = await courses_service.create_course(instructor, "  Rust 101 ", "Systems", 999)

    assert out is doc
    course_cls.assert_called_once_with(course_name="Rust 101", description="Systems", price=999, instructor=instructor.id)
    doc.insert.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("name,price", [("", 100), ("   ", 100), ("Rust", -1)])
async def test_create_course_rejects_bad_input(user_factory, name, price):
    from app.services import courses as courses_service

    with pytest.raises(BadRequestError):
        await courses_service.create_course(user_factory(), name, "", price)


@pytest.mark.asyncio
async def test_unknown_course_is_404():
    from app.services import courses as courses_service

    with patch("app.services.courses.Course.get", AsyncMock(return_value=None)):
        with pytest.raises(NotFoundError):
            await courses_service.get_course_or_404(str(PydanticObjectId()))
    with pytest.raises(NotFoundError):
        await courses_service.get_course_or_404("not-an-id")


@pytest.mark.asyncio
async def test_enrolled_courses_empty_without_query(user_factory):
    from app.services import courses as courses_service

    with patch("app.services.courses.Course.find") as find:
        assert await courses_service.list_enrolled_courses(user_factory()) == []
    find.assert_not_called()


def test_course_summary_counts_students(course_factory):
    from app.services.courses import course_summary

    course = course_factory(price=1500, enrolled=[PydanticObjectId(), PydanticObjectId()])
    course.description = "Intro"
    course.instructor = None
    course.created_at = datetime(2024, 1, 1)
    out = course_summary(course)
    assert out["price"] == 1500
    assert out["students_enrolled_count"] == 2
    assert out["instructor"] is None
    assert out["created_at"] == "2024-01-01T00:00:00"


@pytest.mark.asyncio
async def test_students_cannot_create_courses(client, user_factory):
    student = user_factory()
    # require_instructor calls get_current_user directly, not through Depends
    with patch("app.deps.get_current_user", AsyncMock(return_value=student)):
        r = await client.post("/v1/courses", json={"course_name": "X", "price": 10})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"
