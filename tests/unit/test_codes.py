"""Unit tests for discount code generation."""

import re
from unittest.mock import AsyncMock

import pytest

from affiliate.services.codes import CodeGenerator, generate_code
from affiliate.services.errors import CodeGenerationError


class TestGenerateCode:
    def test_format(self):
        code = generate_code()
        assert re.fullmatch(r"[0-9A-F]{8}", code)

    def test_codes_differ(self):
        codes = {generate_code() for _ in range(200)}
        assert len(codes) > 190


class TestAllocate:
    @pytest.mark.asyncio
    async def test_returns_first_free_code(self, memory_store, seed):
        await seed(memory_store, "taken@test.com", "AAAAAAAA")
        candidates = iter(["AAAAAAAA", "BBBBBBBB"])
        generator = CodeGenerator(memory_store, attempts=5, factory=lambda: next(candidates))

        assert await generator.allocate() == "BBBBBBBB"

    @pytest.mark.asyncio
    async def test_skips_empty_codes(self):
        store = AsyncMock()
        store.code_exists = AsyncMock(return_value=False)
        candidates = iter(["", "CCCCCCCC"])
        generator = CodeGenerator(store, attempts=3, factory=lambda: next(candidates))

        assert await generator.allocate() == "CCCCCCCC"
        store.code_exists.assert_awaited_once_with("CCCCCCCC")

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self):
        store = AsyncMock()
        store.code_exists = AsyncMock(return_value=True)
        generator = CodeGenerator(store, attempts=4, factory=lambda: "DEADBEEF")

        with pytest.raises(CodeGenerationError):
            await generator.allocate()
        assert store.code_exists.await_count == 4
