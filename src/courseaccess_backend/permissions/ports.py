"""
Interfaces of the collaborators the access core depends on.

Production wiring resolves them to the store-backed implementations in
`courseaccess_backend.services`; tests substitute fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from courseaccess_backend.permissions.principal import Principal


class AuthenticationContext(ABC):

    @abstractmethod
    def require_authenticated(self, principal: Principal) -> None:
        """Fail the whole call unless `principal` is proven for this invocation."""
        pass


class AuthorityOracle(ABC):

    @abstractmethod
    async def is_admin(self, principal: Principal) -> bool:
        """Answer whether the principal holds administrative privilege"""
        pass


class CourseCatalog(ABC):

    @abstractmethod
    async def exists(self, course_id: str) -> bool:
        pass

    @abstractmethod
    async def creator_of(self, course_id: str) -> Optional[str]:
        """Return the principal id that created the course.

        Implementations raise CourseNotFoundError for unknown courses.
        """
        pass


class EventSink(ABC):

    @abstractmethod
    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """Fire-and-forget notification; must not fail the publishing operation."""
        pass
