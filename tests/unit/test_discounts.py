"""Unit tests for discount code resolution."""

from decimal import Decimal

import pytest

from affiliate.services.discounts import DiscountResolver
from affiliate.services.errors import ValidationError


@pytest.fixture
def resolver(memory_store):
    return DiscountResolver(memory_store)


class TestResolve:
    @pytest.mark.asyncio
    async def test_valid_code(self, resolver, memory_store, seed):
        affiliate = await seed(memory_store, "a@test.com", "AUTOAXIY")

        outcome = await resolver.resolve("AUTOAXIY", Decimal("250.00"))

        assert outcome.valid is True
        assert outcome.discount_percent == 10
        assert outcome.discount_amount == Decimal("25.00")
        assert outcome.final_amount == Decimal("225.00")
        assert outcome.affiliate_id == affiliate.id
        assert outcome.affiliate_email == "a@test.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "0.01", "1", "19.99", "100", "333.33", "12345.67"])
    async def test_discount_is_exactly_ten_percent(self, resolver, memory_store, seed, amount):
        await seed(memory_store, "a@test.com", "TENPCT01")
        amount = Decimal(amount)

        outcome = await resolver.resolve("TENPCT01", amount)

        assert outcome.discount_amount == amount * Decimal("0.10")
        assert outcome.final_amount == amount - outcome.discount_amount

    @pytest.mark.asyncio
    async def test_unknown_code_is_invalid(self, resolver):
        outcome = await resolver.resolve("NOPE1234", Decimal("100"))

        assert outcome.valid is False
        assert outcome.affiliate_id is None
        assert outcome.discount_amount == 0
        assert outcome.final_amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_inactive_code_is_invalid(self, resolver, memory_store, seed):
        await seed(memory_store, "a@test.com", "SLEEPING", is_active=False)

        outcome = await resolver.resolve("SLEEPING", Decimal("100"))

        assert outcome.valid is False

    @pytest.mark.asyncio
    async def test_match_is_exact(self, resolver, memory_store, seed):
        await seed(memory_store, "a@test.com", "CASE0001")

        outcome = await resolver.resolve("case0001", Decimal("100"))

        assert outcome.valid is False

    @pytest.mark.asyncio
    async def test_idempotent_and_read_only(self, resolver, memory_store, seed):
        affiliate = await seed(memory_store, "a@test.com", "IDEMPOT1")

        first = await resolver.resolve("IDEMPOT1", Decimal("80"))
        second = await resolver.resolve("IDEMPOT1", Decimal("80"))

        assert first == second
        stored = await memory_store.find_by_id(affiliate.id)
        assert stored.total_sales == 0
        assert stored.total_earnings == 0
        assert await memory_store.list_sales() == []

    @pytest.mark.asyncio
    async def test_empty_code_rejected(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.resolve("", Decimal("10"))

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, resolver, memory_store, seed):
        await seed(memory_store, "a@test.com", "NEGATIVE")
        with pytest.raises(ValidationError):
            await resolver.resolve("NEGATIVE", Decimal("-5"))
