"""
Tests for the access index: the access record and its two lookup indices.
"""

import asyncio
import pytest

from courseaccess_backend.api.exceptions import AlreadyGrantedError, InvalidInputError, SystemAlreadyInitializedError
from courseaccess_backend.context import build_services
from courseaccess_backend.permissions.principal import Principal
from courseaccess_backend.services.events import ACCESS_GRANTED, ACCESS_REVOKED
from courseaccess_backend.storage import keys
from courseaccess_backend.tests.fixtures import FailingEventSink, memory_cache, register_courses


async def assert_consistent(index, course_id, user_id):
    """The record and both indices agree on (course_id, user_id)"""
    granted = await index.has_access(course_id, user_id)
    assert (user_id in await index.list_users_for_course(course_id)) == granted
    assert (course_id in await index.list_courses_for_user(user_id)) == granted
    return granted


class TestGrant:

    @pytest.mark.asyncio
    async def test_grant_updates_record_and_both_indices(self, services, events):
        index = services.access_index

        record = await index.grant("c1", "u1")

        assert record.course_id == "c1"
        assert record.user_id == "u1"
        assert await index.has_access("c1", "u1") is True
        assert await index.list_users_for_course("c1") == ["u1"]
        assert await index.list_courses_for_user("u1") == ["c1"]
        assert events.events == [(ACCESS_GRANTED, {"course_id": "c1", "user_id": "u1"})]

    @pytest.mark.asyncio
    async def test_grant_twice_fails_and_changes_nothing(self, services):
        index = services.access_index
        await index.grant("c1", "u1")

        with pytest.raises(AlreadyGrantedError) as exc_info:
            await index.grant("c1", "u1")

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail["error"] == "AlreadyGranted"
        assert await services.store.get(keys.user_courses_key("u1")) == {"user_id": "u1", "courses": ["c1"]}
        assert await services.store.get(keys.course_users_key("c1")) == {"course_id": "c1", "users": ["u1"]}
        assert await assert_consistent(index, "c1", "u1") is True

    @pytest.mark.asyncio
    async def test_grant_writes_through_cache(self, services):
        await services.access_index.grant("c1", "u1")

        assert await services.cache.read(keys.temp_access_key("c1", "u1")) is True
        assert await services.cache.read(keys.temp_user_courses_key("u1")) == ["c1"]
        assert await services.cache.read(keys.temp_course_users_key("c1")) == ["u1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("course_id,user_id", [("", "u1"), ("c1", ""), (None, "u1")])
    async def test_grant_rejects_empty_ids(self, services, course_id, user_id):
        with pytest.raises(InvalidInputError):
            await services.access_index.grant(course_id, user_id)

    @pytest.mark.asyncio
    async def test_event_sink_failure_does_not_fail_grant(self, services):
        services.access_index.events = FailingEventSink()

        await services.access_index.grant("c1", "u1")

        assert await services.access_index.has_access("c1", "u1") is True


class TestRevoke:

    @pytest.mark.asyncio
    async def test_revoke_removes_everything(self, services, events):
        index = services.access_index
        await index.grant("c1", "u1")

        assert await index.revoke("c1", "u1") is True

        assert await assert_consistent(index, "c1", "u1") is False
        # empty indices are pruned
        assert await services.store.has(keys.user_courses_key("u1")) is False
        assert await services.store.has(keys.course_users_key("c1")) is False
        assert events.topics() == [ACCESS_GRANTED, ACCESS_REVOKED]

    @pytest.mark.asyncio
    async def test_revoke_not_granted_returns_false(self, services, events):
        assert await services.access_index.revoke("c1", "u1") is False
        assert events.events == []

    @pytest.mark.asyncio
    async def test_revoke_twice(self, services):
        index = services.access_index
        await index.grant("c1", "u1")

        assert await index.revoke("c1", "u1") is True
        assert await index.revoke("c1", "u1") is False

    @pytest.mark.asyncio
    async def test_revoke_with_empty_id_returns_false(self, services):
        assert await services.access_index.revoke("", "u1") is False

    @pytest.mark.asyncio
    async def test_revoke_keeps_other_entries(self, services):
        index = services.access_index
        await index.grant("c1", "u1")
        await index.grant("c1", "u2")
        await index.grant("c2", "u1")

        await index.revoke("c1", "u1")

        assert await index.list_users_for_course("c1") == ["u2"]
        assert await index.list_courses_for_user("u1") == ["c2"]
        assert await index.has_access("c1", "u2") is True
        assert await index.has_access("c2", "u1") is True

    @pytest.mark.asyncio
    async def test_revoke_invalidates_cached_negative_reads(self, services):
        index = services.access_index
        await index.grant("c1", "u1")
        assert await index.has_access("c1", "u1") is True

        await index.revoke("c1", "u1")

        assert await services.cache.read(keys.temp_access_key("c1", "u1")) is None
        assert await index.has_access("c1", "u1") is False


class TestReads:

    @pytest.mark.asyncio
    async def test_unknown_pairs_default_to_empty(self, services):
        index = services.access_index

        assert await index.has_access("c9", "u9") is False
        assert await index.list_courses_for_user("u9") == []
        assert await index.list_users_for_course("c9") == []

    @pytest.mark.asyncio
    async def test_miss_populates_cache(self, services):
        await services.store.set(keys.course_access_key("c1", "u1"), {"course_id": "c1", "user_id": "u1"})

        assert await services.access_index.has_access("c1", "u1") is True
        assert await services.cache.read(keys.temp_access_key("c1", "u1")) is True

    @pytest.mark.asyncio
    async def test_cache_hit_skips_store(self, services):
        await services.cache.write(keys.temp_user_courses_key("u1"), ["cached"])

        assert await services.access_index.list_courses_for_user("u1") == ["cached"]

    @pytest.mark.asyncio
    async def test_reads_are_unchanged_by_eviction(self, services):
        index = services.access_index
        await index.grant("c1", "u1")
        await index.grant("c2", "u1")
        await index.revoke("c1", "u1")

        before = (
            await index.has_access("c1", "u1"),
            await index.has_access("c2", "u1"),
            await index.list_courses_for_user("u1"),
            await index.list_users_for_course("c2"),
        )

        for key in (
            keys.temp_access_key("c1", "u1"),
            keys.temp_access_key("c2", "u1"),
            keys.temp_user_courses_key("u1"),
            keys.temp_course_users_key("c2"),
        ):
            await services.cache.invalidate(key)

        after = (
            await index.has_access("c1", "u1"),
            await index.has_access("c2", "u1"),
            await index.list_courses_for_user("u1"),
            await index.list_users_for_course("c2"),
        )

        assert before == after == (False, True, ["c2"], ["u1"])

    @pytest.mark.asyncio
    async def test_explicit_invalidation(self, services):
        index = services.access_index
        await index.grant("c1", "u1")

        await index.invalidate_user_cache("u1")
        await index.invalidate_course_cache("c1")

        assert await services.cache.read(keys.temp_user_courses_key("u1")) is None
        assert await services.cache.read(keys.temp_course_users_key("c1")) is None
        assert await index.list_courses_for_user("u1") == ["c1"]
        assert await index.list_users_for_course("c1") == ["u1"]


class TestScenarios:

    @pytest.mark.asyncio
    async def test_grant_check_list_revoke(self, services):
        index = services.access_index

        await index.grant("c1", "u1")
        await index.grant("c1", "u2")

        assert await index.has_access("c1", "u1") is True
        assert sorted(await index.list_users_for_course("c1")) == ["u1", "u2"]

        assert await index.revoke("c1", "u2") is True
        assert await index.revoke("c1", "u2") is False
        assert await index.list_users_for_course("c1") == ["u1"]

    @pytest.mark.asyncio
    async def test_mixed_sequence_stays_consistent(self, services):
        index = services.access_index
        operations = [
            ("grant", "c1", "u1"), ("grant", "c2", "u1"), ("grant", "c1", "u2"),
            ("revoke", "c1", "u1"), ("grant", "c1", "u1"), ("revoke", "c2", "u1"),
            ("revoke", "c3", "u3"), ("grant", "c3", "u2"), ("revoke", "c1", "u2"),
        ]

        for op, course_id, user_id in operations:
            if op == "grant":
                await index.grant(course_id, user_id)
            else:
                await index.revoke(course_id, user_id)

        expected = {("c1", "u1"), ("c3", "u2")}
        for course_id in ("c1", "c2", "c3"):
            for user_id in ("u1", "u2", "u3"):
                granted = await assert_consistent(index, course_id, user_id)
                assert granted == ((course_id, user_id) in expected)

            users = await index.list_users_for_course(course_id)
            assert len(users) == len(set(users))


class TestDurableExpiry:
    """Access data expires as a whole; catalog and admin data never expires"""

    @pytest.fixture
    def expiring(self, events):
        return build_services(memory_cache(), memory_cache(), events=events, durable_ttl=1)

    async def evict(self, services, course_ids, user_ids):
        for course_id in course_ids:
            await services.cache.invalidate(keys.temp_course_users_key(course_id))
            for user_id in user_ids:
                await services.cache.invalidate(keys.temp_access_key(course_id, user_id))
        for user_id in user_ids:
            await services.cache.invalidate(keys.temp_user_courses_key(user_id))

    @pytest.mark.asyncio
    async def test_expired_record_leaves_no_index_entry(self, expiring):
        alice = Principal.authenticated_as("alice")
        index = expiring.access_index
        await expiring.authority.initialize(alice)
        await register_courses(expiring, "alice", "c1", "c2")

        await index.grant("c1", "u1")
        await asyncio.sleep(0.6)
        await index.grant("c2", "u1")
        await asyncio.sleep(0.6)
        await self.evict(expiring, ["c1", "c2"], ["u1"])

        # the c1 record expired, the user index was rewritten later
        assert await assert_consistent(index, "c1", "u1") is False
        assert await assert_consistent(index, "c2", "u1") is True
        assert await index.list_courses_for_user("u1") == ["c2"]
        assert await expiring.store.get(keys.user_courses_key("u1")) == {"user_id": "u1", "courses": ["c2"]}

        assert await index.revoke("c1", "u1") is False
        await index.grant("c1", "u1")
        assert await assert_consistent(index, "c1", "u1") is True

    @pytest.mark.asyncio
    async def test_catalog_and_admin_config_do_not_expire(self, expiring):
        alice = Principal.authenticated_as("alice")
        await expiring.authority.initialize(alice)
        await expiring.authority.add_admin(alice, "bob")
        await register_courses(expiring, "alice", "c1", "c2")
        await expiring.prerequisites.set_prerequisites(alice, "c1", ["c2"])

        await asyncio.sleep(1.3)

        assert await expiring.catalog.creator_of("c1") == "alice"
        assert await expiring.prerequisites.get_prerequisites("c1") == ["c2"]
        assert await expiring.authority.is_admin(Principal.authenticated_as("bob")) is True
        with pytest.raises(SystemAlreadyInitializedError):
            await expiring.authority.initialize(Principal.authenticated_as("mallory"))

    @pytest.mark.asyncio
    async def test_reading_a_grant_refreshes_the_whole_triple(self, expiring):
        index = expiring.access_index
        await index.grant("c1", "u1")

        await asyncio.sleep(0.6)
        await self.evict(expiring, ["c1"], ["u1"])
        assert await index.has_access("c1", "u1") is True
        await asyncio.sleep(0.6)
        await self.evict(expiring, ["c1"], ["u1"])

        assert await assert_consistent(index, "c1", "u1") is True
        assert await index.list_users_for_course("c1") == ["u1"]
