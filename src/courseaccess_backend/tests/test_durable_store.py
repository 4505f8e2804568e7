"""
Tests for the durable key/value store and its staged transactions.
"""

import asyncio
import pytest

from courseaccess_backend.storage.durable import DurableIndexStore


class ExpectedFailure(Exception):
    pass


@pytest.fixture
def store(durable_backend):
    return DurableIndexStore(durable_backend)


class TestDurableIndexStore:

    @pytest.mark.asyncio
    async def test_get_default_for_missing_key(self, store):
        assert await store.get("missing") is None
        assert await store.get("missing", []) == []
        assert await store.has("missing") is False

    @pytest.mark.asyncio
    async def test_set_get_delete(self, store):
        await store.set("k", {"a": 1})

        assert await store.has("k") is True
        assert await store.get("k") == {"a": 1}

        assert await store.delete("k") is True
        assert await store.has("k") is False

    @pytest.mark.asyncio
    async def test_bump_existing_and_missing_key(self, store):
        await store.set("k", [1, 2])

        assert await store.bump("k") is True
        assert await store.get("k") == [1, 2]
        assert await store.bump("missing") is False

    def test_zero_ttl_disables_expiry(self, durable_backend):
        assert DurableIndexStore(durable_backend, ttl=0).ttl is None
        assert DurableIndexStore(durable_backend, ttl=60).ttl == 60


class TestStagedTransaction:

    @pytest.mark.asyncio
    async def test_commit_applies_all_writes(self, store):
        await store.set("old", "value")

        async with store.transaction() as txn:
            txn.set("a", 1)
            txn.set("b", [2])
            txn.delete("old")
            assert txn.pending == 3

        assert await store.get("a") == 1
        assert await store.get("b") == [2]
        assert await store.has("old") is False

    @pytest.mark.asyncio
    async def test_exception_discards_staged_writes(self, store):
        await store.set("keep", "original")

        with pytest.raises(ExpectedFailure):
            async with store.transaction() as txn:
                txn.set("new", 1)
                txn.set("keep", "changed")
                raise ExpectedFailure()

        assert await store.has("new") is False
        assert await store.get("keep") == "original"

        # lock released after the failed transaction
        async with store.transaction() as txn:
            txn.set("new", 2)
        assert await store.get("new") == 2

    @pytest.mark.asyncio
    async def test_reads_see_staged_writes(self, store):
        await store.set("k", "stored")

        async with store.transaction() as txn:
            assert await txn.get("k") == "stored"

            txn.set("k", "staged")
            assert await txn.get("k") == "staged"
            assert await store.get("k") == "stored"

            txn.delete("k")
            assert await txn.has("k") is False
            assert await txn.get("k", "fallback") == "fallback"

        assert await store.has("k") is False

    @pytest.mark.asyncio
    async def test_after_commit_hooks_only_run_on_success(self, store):
        calls = []

        async def hook():
            calls.append(await store.get("k"))

        async with store.transaction() as txn:
            txn.set("k", "v")
            txn.after_commit(hook)

        assert calls == ["v"]

        with pytest.raises(ExpectedFailure):
            async with store.transaction() as txn:
                txn.set("k", "other")
                txn.after_commit(hook)
                raise ExpectedFailure()

        assert calls == ["v"]

    @pytest.mark.asyncio
    async def test_bump_of_unwritten_key(self, store):
        await store.set("k", "v")

        async with store.transaction() as txn:
            txn.bump("k")
            txn.bump("missing")

        assert await store.get("k") == "v"
        assert await store.has("missing") is False


class TestExpiry:
    """Only non-persistent keys carry the store TTL"""

    @pytest.mark.asyncio
    async def test_persistent_keys_outlive_ttl(self, durable_backend):
        store = DurableIndexStore(durable_backend, ttl=1)

        await store.set("expiring", 1)
        await store.set("kept", 2, persistent=True)
        async with store.transaction() as txn:
            txn.set("staged-expiring", 3)
            txn.set("staged-kept", 4, persistent=True)

        await asyncio.sleep(1.3)

        assert await store.has("expiring") is False
        assert await store.has("staged-expiring") is False
        assert await store.get("kept") == 2
        assert await store.get("staged-kept") == 4

    @pytest.mark.asyncio
    async def test_persistent_write_clears_previous_expiry(self, durable_backend):
        store = DurableIndexStore(durable_backend, ttl=1)

        await store.set("k", "first")
        await store.set("k", "second", persistent=True)
        await asyncio.sleep(1.3)

        assert await store.get("k") == "second"

    @pytest.mark.asyncio
    async def test_bump_extends_expiry(self, durable_backend):
        store = DurableIndexStore(durable_backend, ttl=1)

        await store.set("k", "v")
        await asyncio.sleep(0.6)
        async with store.transaction() as txn:
            txn.bump("k")
        await asyncio.sleep(0.6)

        assert await store.get("k") == "v"
