import logging
from typing import Any, Dict

from courseaccess_backend.permissions.ports import EventSink

logger = logging.getLogger(__name__)

ACCESS_GRANTED = "course_access.granted"
ACCESS_REVOKED = "course_access.revoked"
PREREQUISITES_UPDATED = "course_prerequisites.updated"
COURSE_REGISTERED = "course.registered"


class LoggingEventSink(EventSink):
    """Default sink: events end up in the service log"""

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        logger.info(f"Event {topic}: {payload}")


async def publish_safely(sink: EventSink, topic: str, payload: Dict[str, Any]):
    """Publish without letting a sink failure fail the operation that already committed"""
    if sink is None:
        return
    try:
        await sink.publish(topic, payload)
    except Exception as e:
        logger.warning(f"Failed to publish {topic}: {e}")
