"""Unit tests for the purchase flow."""

from decimal import Decimal

import pytest

from affiliate.services.checkout import CheckoutService
from affiliate.services.commissions import CommissionEngine
from affiliate.services.discounts import DiscountResolver
from affiliate.services.errors import ValidationError
from affiliate.services.ledger import LedgerService


def make_checkout(store, parent_rate="0.05"):
    return CheckoutService(
        DiscountResolver(store),
        CommissionEngine(Decimal("0.20"), Decimal(parent_rate)),
        LedgerService(store),
    )


class TestPurchase:
    @pytest.mark.asyncio
    async def test_valid_code_without_parent(self, memory_store, seed):
        affiliate = await seed(memory_store, "a@test.com", "AUTOAXIY")
        checkout = make_checkout(memory_store)

        result = await checkout.purchase(Decimal("250.00"), "customer1@example.com", "AUTOAXIY")

        sale = result.sale
        assert sale.discount_amount == Decimal("25.00")
        assert sale.final_amount == Decimal("225.00")
        assert sale.affiliate_commission == Decimal("50.00")
        assert sale.parent_commission == 0
        assert sale.affiliate_id == affiliate.id
        assert sale.discount_code == "AUTOAXIY"
        assert result.affiliate_commission == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_unknown_code_degrades(self, memory_store):
        checkout = make_checkout(memory_store)

        result = await checkout.purchase(Decimal("100.00"), "c@example.com", "UNKNOWN1")

        sale = result.sale
        assert sale.affiliate_id is None
        assert sale.discount_amount == 0
        assert sale.final_amount == Decimal("100.00")
        assert sale.affiliate_commission == 0
        assert sale.parent_commission == 0
        assert sale.discount_code == "UNKNOWN1"

    @pytest.mark.asyncio
    async def test_inactive_code_degrades(self, memory_store, seed):
        await seed(memory_store, "a@test.com", "DISABLED", is_active=False)
        checkout = make_checkout(memory_store)

        result = await checkout.purchase(Decimal("60"), "c@example.com", "DISABLED")

        assert result.sale.affiliate_id is None
        assert result.sale.final_amount == Decimal("60")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, "", "   "])
    async def test_without_code(self, memory_store, code):
        checkout = make_checkout(memory_store)

        result = await checkout.purchase("42.50", "c@example.com", code)

        assert result.sale.discount_code is None
        assert result.sale.final_amount == Decimal("42.50")

    @pytest.mark.asyncio
    async def test_parent_gets_commission_not_sale(self, memory_store, seed):
        parent = await seed(memory_store, "b@test.com", "PARENTBB")
        child = await seed(memory_store, "a@test.com", "CHILDAAA", parent=parent)
        checkout = make_checkout(memory_store)

        result = await checkout.purchase(Decimal("200.00"), "c@example.com", "CHILDAAA")

        assert result.affiliate_commission == Decimal("40.00")
        assert result.parent_commission == Decimal("10.00")
        child = await memory_store.find_by_id(child.id)
        parent = await memory_store.find_by_id(parent.id)
        assert child.total_sales == 1
        assert child.total_earnings == Decimal("40.00")
        assert parent.total_sales == 0
        assert parent.total_earnings == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_parent_rate_is_configurable(self, memory_store, seed):
        parent = await seed(memory_store, "b@test.com", "PARENTBB")
        await seed(memory_store, "a@test.com", "CHILDAAA", parent=parent)
        checkout = make_checkout(memory_store, parent_rate="0.20")

        result = await checkout.purchase(Decimal("200.00"), "c@example.com", "CHILDAAA")

        assert result.affiliate_commission == Decimal("40.00")
        assert result.parent_commission == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_grandparent_gets_nothing(self, memory_store, seed):
        grandparent = await seed(memory_store, "g@test.com", "GRANDPAA")
        parent = await seed(memory_store, "p@test.com", "PARENTBB", parent=grandparent)
        await seed(memory_store, "c@test.com", "CHILDCCC", parent=parent)
        checkout = make_checkout(memory_store)

        await checkout.purchase(Decimal("100"), "x@example.com", "CHILDCCC")

        grandparent = await memory_store.find_by_id(grandparent.id)
        assert grandparent.total_earnings == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount, email",
        [(None, "c@example.com"), (0, "c@example.com"), (-10, "c@example.com"), (10, ""), (10, None)],
    )
    async def test_rejects_missing_fields(self, memory_store, amount, email):
        checkout = make_checkout(memory_store)

        with pytest.raises(ValidationError):
            await checkout.purchase(amount, email)
        assert await memory_store.list_sales() == []
