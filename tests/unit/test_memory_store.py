"""Unit tests for the in-memory store lifecycle."""

import pytest

from affiliate.services.errors import StoreFailure
from affiliate.storage import MemoryStore


class TestMemoryStoreLifecycle:
    @pytest.mark.asyncio
    async def test_reads_require_open_store(self):
        store = MemoryStore()

        with pytest.raises(StoreFailure):
            await store.find_by_id(1)

    @pytest.mark.asyncio
    async def test_transaction_requires_open_store(self):
        store = MemoryStore()

        with pytest.raises(StoreFailure):
            async with store.transaction():
                pass

    @pytest.mark.asyncio
    async def test_closed_store_rejects_calls(self, memory_store, seed):
        await seed(memory_store, "a@test.com", "AFFIL001")
        await memory_store.close()

        with pytest.raises(StoreFailure):
            await memory_store.find_by_code("AFFIL001")
