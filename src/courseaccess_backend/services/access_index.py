"""
Access index: the relation "user has access to course".

Three structures describe the relation and are only ever changed together:

- the access record, keyed by (course_id, user_id); presence means granted
- the user index, user_id -> [course_id]
- the course index, course_id -> [user_id]

After every successful grant or revoke the record exists iff the course is
in the user's index iff the user is in the course's index, and neither index
holds duplicates. The ephemeral cache is written through (grant) or
invalidated (revoke) under the store's write lock, so a cache hit is never
older than the last write made through this class.

With a durable TTL configured, an access record may expire while an index
written later still lists it. Index entries are only reported while their
record exists; dangling entries are pruned whenever an index is loaded.
Reading a granted record refreshes the record and both indices together.
"""

import logging
from typing import List

from courseaccess_backend.api.exceptions import AlreadyGrantedError, InvalidInputError
from courseaccess_backend.interface.access import CourseAccess, CourseUsers, UserCourses
from courseaccess_backend.permissions.ports import EventSink
from courseaccess_backend.services.events import ACCESS_GRANTED, ACCESS_REVOKED, publish_safely
from courseaccess_backend.storage import keys
from courseaccess_backend.storage.durable import DurableIndexStore, StagedTransaction
from courseaccess_backend.storage.ephemeral import EphemeralCache

logger = logging.getLogger(__name__)


class AccessIndex:

    def __init__(self, store: DurableIndexStore, cache: EphemeralCache, events: EventSink = None):
        self.store = store
        self.cache = cache
        self.events = events

    async def grant(self, course_id: str, user_id: str) -> CourseAccess:
        """
        Grant `user_id` access to `course_id`.

        Granting twice is a caller error, not a no-op.

        Raises:
            InvalidInputError: empty course or user id
            AlreadyGrantedError: the pair already has an access record
        """
        if not course_id or not user_id:
            raise InvalidInputError("course_id and user_id are required", course_id=course_id, user_id=user_id)

        access_key = keys.course_access_key(course_id, user_id)

        async with self.store.transaction() as txn:
            if await txn.has(access_key):
                raise AlreadyGrantedError(course_id, user_id)

            record = CourseAccess(course_id=course_id, user_id=user_id)
            user_courses = await self._live_user_courses(txn, user_id)
            course_users = await self._live_course_users(txn, course_id)

            if course_id not in user_courses.courses:
                user_courses.courses.append(course_id)
            if user_id not in course_users.users:
                course_users.users.append(user_id)

            # writes refresh the durable expiry of all three keys
            txn.set(access_key, record.model_dump())
            txn.set(keys.user_courses_key(user_id), user_courses.model_dump())
            txn.set(keys.course_users_key(course_id), course_users.model_dump())

            async def refresh_cache():
                await self.cache.write(keys.temp_access_key(course_id, user_id), True)
                await self.cache.write(keys.temp_user_courses_key(user_id), user_courses.courses)
                await self.cache.write(keys.temp_course_users_key(course_id), course_users.users)

            txn.after_commit(refresh_cache)

        logger.info(f"Granted access to course {course_id} for user {user_id}")
        await publish_safely(self.events, ACCESS_GRANTED, record.model_dump())

        return record

    async def revoke(self, course_id: str, user_id: str) -> bool:
        """
        Revoke `user_id`'s access to `course_id`.

        Returns:
            True if an access record was removed, False if there was none
        """
        if not course_id or not user_id:
            return False

        access_key = keys.course_access_key(course_id, user_id)

        async with self.store.transaction() as txn:
            user_courses = await self._live_user_courses(txn, user_id)
            course_users = await self._live_course_users(txn, course_id)

            if not await txn.has(access_key):
                # loading the indices already dropped an expired entry of the pair
                return False

            txn.delete(access_key)

            user_courses.courses = [c for c in user_courses.courses if c != course_id]
            self._stage_user_courses(txn, user_courses)

            course_users.users = [u for u in course_users.users if u != user_id]
            self._stage_course_users(txn, course_users)

            async def drop_cache():
                await self.cache.invalidate(keys.temp_access_key(course_id, user_id))
                await self.cache.invalidate(keys.temp_user_courses_key(user_id))
                await self.cache.invalidate(keys.temp_course_users_key(course_id))

            txn.after_commit(drop_cache)

        logger.info(f"Revoked access to course {course_id} for user {user_id}")
        await publish_safely(self.events, ACCESS_REVOKED, {"course_id": course_id, "user_id": user_id})

        return True

    async def has_access(self, course_id: str, user_id: str) -> bool:
        temp_key = keys.temp_access_key(course_id, user_id)

        cached = await self.cache.read(temp_key)
        if cached is not None:
            return bool(cached)

        # populate under the write lock so a concurrent grant/revoke cannot be overwritten with an older answer
        async with self.store.transaction() as txn:
            access_key = keys.course_access_key(course_id, user_id)
            granted = await txn.has(access_key)
            if granted:
                # the indices must never expire before the record
                txn.bump(access_key)
                txn.bump(keys.user_courses_key(user_id))
                txn.bump(keys.course_users_key(course_id))
            txn.after_commit(lambda: self.cache.write(temp_key, granted))

        return granted

    async def list_courses_for_user(self, user_id: str) -> List[str]:
        temp_key = keys.temp_user_courses_key(user_id)

        cached = await self.cache.read(temp_key)
        if cached is not None:
            return list(cached)

        async with self.store.transaction() as txn:
            courses = (await self._live_user_courses(txn, user_id)).courses
            txn.after_commit(lambda: self.cache.write(temp_key, courses))

        return list(courses)

    async def list_users_for_course(self, course_id: str) -> List[str]:
        temp_key = keys.temp_course_users_key(course_id)

        cached = await self.cache.read(temp_key)
        if cached is not None:
            return list(cached)

        async with self.store.transaction() as txn:
            users = (await self._live_course_users(txn, course_id)).users
            txn.after_commit(lambda: self.cache.write(temp_key, users))

        return list(users)

    async def invalidate_user_cache(self, user_id: str):
        """For callers that changed a user's index without going through grant/revoke"""
        await self.cache.invalidate(keys.temp_user_courses_key(user_id))

    async def invalidate_course_cache(self, course_id: str):
        await self.cache.invalidate(keys.temp_course_users_key(course_id))

    async def _load_user_courses(self, reader, user_id: str) -> UserCourses:
        data = await reader.get(keys.user_courses_key(user_id))
        if not data:
            return UserCourses(user_id=user_id)
        return UserCourses.model_validate(data)

    async def _load_course_users(self, reader, course_id: str) -> CourseUsers:
        data = await reader.get(keys.course_users_key(course_id))
        if not data:
            return CourseUsers(course_id=course_id)
        return CourseUsers.model_validate(data)

    async def _live_user_courses(self, txn: StagedTransaction, user_id: str) -> UserCourses:
        user_courses = await self._load_user_courses(txn, user_id)
        live = [c for c in user_courses.courses if await txn.has(keys.course_access_key(c, user_id))]

        if len(live) != len(user_courses.courses):
            logger.info(f"Pruned {len(user_courses.courses) - len(live)} expired courses from user {user_id}")
            user_courses.courses = live
            self._stage_user_courses(txn, user_courses)
            txn.after_commit(lambda: self.cache.invalidate(keys.temp_user_courses_key(user_id)))

        return user_courses

    async def _live_course_users(self, txn: StagedTransaction, course_id: str) -> CourseUsers:
        course_users = await self._load_course_users(txn, course_id)
        live = [u for u in course_users.users if await txn.has(keys.course_access_key(course_id, u))]

        if len(live) != len(course_users.users):
            logger.info(f"Pruned {len(course_users.users) - len(live)} expired users from course {course_id}")
            course_users.users = live
            self._stage_course_users(txn, course_users)
            txn.after_commit(lambda: self.cache.invalidate(keys.temp_course_users_key(course_id)))

        return course_users

    def _stage_user_courses(self, txn: StagedTransaction, user_courses: UserCourses):
        # an empty index is pruned, absence reads as []
        if user_courses.courses:
            txn.set(keys.user_courses_key(user_courses.user_id), user_courses.model_dump())
        else:
            txn.delete(keys.user_courses_key(user_courses.user_id))

    def _stage_course_users(self, txn: StagedTransaction, course_users: CourseUsers):
        if course_users.users:
            txn.set(keys.course_users_key(course_users.course_id), course_users.model_dump())
        else:
            txn.delete(keys.course_users_key(course_users.course_id))
