"""
Test utilities shared by the test modules.
"""

from typing import Any, Dict, List, Tuple
from uuid import uuid4

from aiocache import Cache
from aiocache.serializers import JsonSerializer

from courseaccess_backend.permissions.ports import EventSink
from courseaccess_backend.permissions.principal import Principal


def memory_cache():
    """In-memory aiocache backend with a namespace of its own.

    Every test gets a fresh namespace so entries never leak between tests.
    """
    return Cache(Cache.MEMORY, serializer=JsonSerializer(), namespace=f"test-{uuid4().hex}")


class RecordingEventSink(EventSink):
    """Keeps published events for assertions"""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        self.events.append((topic, payload))

    def topics(self) -> List[str]:
        return [topic for topic, _ in self.events]


class FailingEventSink(EventSink):

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        raise ConnectionError("event bus unavailable")


async def register_courses(services, creator: str, *course_ids: str):
    principal = Principal.authenticated_as(creator)
    for course_id in course_ids:
        await services.catalog.register_course(principal, course_id)
