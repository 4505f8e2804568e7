"""
Store-backed implementations of the collaborator interfaces.

Course metadata (titles, pricing, modules) is owned elsewhere; the catalog
only keeps what access control needs: which courses exist and who created
them. The authority oracle keeps the administrator configuration.
"""

import logging
from typing import List, Optional

from courseaccess_backend.api.exceptions import (
    CourseAlreadyExistsError,
    CourseNotFoundError,
    InvalidInputError,
    SystemAlreadyInitializedError,
    SystemNotInitializedError,
    UnauthorizedError,
)
from courseaccess_backend.interface.courses import CourseGet
from courseaccess_backend.interface.system import AdminConfig, AdminList
from courseaccess_backend.permissions.ports import AuthenticationContext, AuthorityOracle, CourseCatalog, EventSink
from courseaccess_backend.permissions.principal import Principal
from courseaccess_backend.services.events import COURSE_REGISTERED, publish_safely
from courseaccess_backend.storage import keys
from courseaccess_backend.storage.durable import DurableIndexStore

logger = logging.getLogger(__name__)


class PrincipalAuthentication(AuthenticationContext):
    """Trusts the `authenticated` flag set by whoever built the principal"""

    def require_authenticated(self, principal: Principal) -> None:
        if principal is None or not principal.authenticated:
            raise UnauthorizedError("Caller is not authenticated")


class StoreCourseCatalog(CourseCatalog):

    def __init__(self, store: DurableIndexStore, authentication: AuthenticationContext, events: EventSink = None):
        self.store = store
        self.authentication = authentication
        self.events = events

    async def exists(self, course_id: str) -> bool:
        if not course_id:
            return False
        return await self.store.has(keys.course_key(course_id))

    async def get_course(self, course_id: str) -> CourseGet:
        data = await self.store.get(keys.course_key(course_id)) if course_id else None
        if data is None:
            raise CourseNotFoundError(course_id)
        return CourseGet.model_validate(data)

    async def creator_of(self, course_id: str) -> Optional[str]:
        return (await self.get_course(course_id)).creator

    async def register_course(self, caller: Principal, course_id: str) -> CourseGet:
        """Record a new course with the authenticated caller as its creator"""
        self.authentication.require_authenticated(caller)
        if not course_id:
            raise InvalidInputError("course_id is required")

        course_key = keys.course_key(course_id)
        course = CourseGet(id=course_id, creator=caller.user_id)

        async with self.store.transaction() as txn:
            if await txn.has(course_key):
                raise CourseAlreadyExistsError(course_id)
            txn.set(course_key, course.model_dump(), persistent=True)

        logger.info(f"Registered course {course_id} created by {caller.user_id}")
        await publish_safely(self.events, COURSE_REGISTERED, course.model_dump())

        return course


class StoreAuthorityOracle(AuthorityOracle):
    """
    Administrator configuration: one super admin set at initialization and a
    list of regular admins managed by the super admin.
    """

    def __init__(self, store: DurableIndexStore, authentication: AuthenticationContext):
        self.store = store
        self.authentication = authentication

    async def get_config(self) -> AdminConfig:
        data = await self.store.get(keys.admin_config_key())
        return AdminConfig.model_validate(data) if data else AdminConfig()

    async def is_initialized(self) -> bool:
        return (await self.get_config()).initialized

    async def require_initialized(self) -> AdminConfig:
        config = await self.get_config()
        if not config.initialized:
            raise SystemNotInitializedError()
        return config

    async def is_super_admin(self, principal: Principal) -> bool:
        config = await self.require_initialized()
        return principal.user_id is not None and config.super_admin == principal.user_id

    async def is_admin(self, principal: Principal) -> bool:
        if await self.is_super_admin(principal):
            return True
        admins = await self.store.get(keys.admins_key(), [])
        return principal.user_id in admins

    async def initialize(self, caller: Principal) -> AdminConfig:
        """Make the authenticated caller the super admin"""
        self.authentication.require_authenticated(caller)

        config = AdminConfig(initialized=True, super_admin=caller.user_id)
        async with self.store.transaction() as txn:
            current = await txn.get(keys.admin_config_key())
            if current and current.get("initialized"):
                raise SystemAlreadyInitializedError()
            txn.set(keys.admin_config_key(), config.model_dump(), persistent=True)

        logger.info(f"System initialized with super admin {caller.user_id}")
        return config

    async def add_admin(self, caller: Principal, user_id: str) -> List[str]:
        await self._require_super_admin(caller)
        if not user_id:
            raise InvalidInputError("user_id is required")

        async with self.store.transaction() as txn:
            admins = list(await txn.get(keys.admins_key(), []))
            if user_id not in admins:
                admins.append(user_id)
                txn.set(keys.admins_key(), admins, persistent=True)

        logger.info(f"Admin {user_id} added by {caller.user_id}")
        return admins

    async def remove_admin(self, caller: Principal, user_id: str) -> List[str]:
        await self._require_super_admin(caller)

        async with self.store.transaction() as txn:
            admins = list(await txn.get(keys.admins_key(), []))
            if user_id in admins:
                admins.remove(user_id)
                txn.set(keys.admins_key(), admins, persistent=True)

        logger.info(f"Admin {user_id} removed by {caller.user_id}")
        return admins

    async def list_admins(self) -> AdminList:
        config = await self.require_initialized()
        admins = await self.store.get(keys.admins_key(), [])
        return AdminList(super_admin=config.super_admin, admins=admins)

    async def _require_super_admin(self, caller: Principal):
        self.authentication.require_authenticated(caller)
        if not await self.is_super_admin(caller):
            raise UnauthorizedError("Only the super admin can manage admins", user_id=caller.user_id)
