import logging
from typing import Optional

from courseaccess_backend.api.exceptions import UnauthorizedError
from courseaccess_backend.permissions.ports import AuthenticationContext, AuthorityOracle, CourseCatalog
from courseaccess_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Policy combinator in front of the access index and the prerequisite graph.

    The gate holds no state of its own. Every check first requires the caller
    to be authenticated, then combines the creator, administrator and access
    relations the collaborators report.
    """

    def __init__(
        self,
        authentication: AuthenticationContext,
        authority: AuthorityOracle,
        catalog: CourseCatalog,
        access_index=None,
    ):
        self.authentication = authentication
        self.authority = authority
        self.catalog = catalog
        # AccessIndex; only needed by require_course_access
        self.access_index = access_index

    def require_authenticated(self, caller: Principal):
        self.authentication.require_authenticated(caller)
        if caller.user_id is None:
            raise UnauthorizedError("Caller identity is missing")

    async def is_course_creator(self, caller: Principal, course_id: str) -> bool:
        creator = await self.catalog.creator_of(course_id)
        return creator is not None and creator == caller.user_id

    async def is_admin(self, caller: Principal) -> bool:
        return await self.authority.is_admin(caller)

    async def require_course_access(self, caller: Principal, course_id: str):
        """Caller holds an access record, created the course or is an administrator"""
        self.require_authenticated(caller)

        if self.access_index is not None and await self.access_index.has_access(course_id, caller.user_id):
            return
        if await self.is_course_creator(caller, course_id):
            return
        if await self.is_admin(caller):
            return

        self._deny(caller, "course access", course_id)

    async def require_management_rights(self, caller: Principal, course_id: str):
        """Caller created the course or is an administrator"""
        self.require_authenticated(caller)

        if await self.is_course_creator(caller, course_id):
            return
        if await self.is_admin(caller):
            return

        self._deny(caller, "management rights", course_id)

    async def require_course_creator(self, caller: Principal, course_id: str):
        self.require_authenticated(caller)

        if not await self.is_course_creator(caller, course_id):
            self._deny(caller, "course creator", course_id)

    async def require_admin(self, caller: Principal):
        self.require_authenticated(caller)

        if not await self.is_admin(caller):
            self._deny(caller, "administrator")

    async def require_self_or_admin(self, caller: Principal, target_user_id: str):
        """Caller acts on its own behalf, or is an administrator"""
        self.require_authenticated(caller)

        if caller.user_id == target_user_id:
            return
        if await self.is_admin(caller):
            return

        self._deny(caller, "self or administrator")

    def _deny(self, caller: Principal, requirement: str, course_id: Optional[str] = None):
        logger.info(f"Denied {requirement} for {caller.user_id} on course {course_id}")
        raise UnauthorizedError(f"Caller lacks {requirement}", user_id=caller.user_id, course_id=course_id)
