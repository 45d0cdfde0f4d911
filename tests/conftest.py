import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from beanie import PydanticObjectId
from httpx import ASGITransport, AsyncClient

# Test settings; must be set before app.core.config caches Settings
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB_NAME", "studynotion_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "rzp_webhook_secret")


def make_course(price: int = 500, name: str = "Python for Beginners", enrolled=None) -> MagicMock:
    """Stand-in for a Course document: attribute access plus awaitable update()."""
    course = MagicMock()
    course.id = PydanticObjectId()
    course.course_name = name
    course.price = price
    course.students_enrolled = list(enrolled or [])
    course.update = AsyncMock()
    return course


def make_user(first_name: str = "Asha", last_name: str = "Rao") -> MagicMock:
    user = MagicMock()
    user.id = PydanticObjectId()
    user.email = "asha@example.com"
    user.first_name = first_name
    user.last_name = last_name
    user.display_name = f"{first_name} {last_name}"
    user.role = "student"
    user.courses = []
    user.course_progress = []
    user.update = AsyncMock()
    return user


@pytest.fixture
def course_factory():
    return make_course


@pytest.fixture
def user_factory():
    return make_user


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """ASGI client without lifespan: no Mongo connection is opened."""
    from app.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
