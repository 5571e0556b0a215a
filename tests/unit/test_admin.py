"""Unit tests for sale moderation."""

from decimal import Decimal

import pytest

from affiliate.models import SaleStatus
from affiliate.services.errors import NotFoundError, ValidationError


class TestAdmin:
    @pytest.mark.asyncio
    async def test_overview_counts_approved_commission(self, services, memory_store, seed):
        await seed(memory_store, "a@test.com", "AFFIL001")
        first = await services.checkout.purchase(Decimal("100"), "c1@x.com", "AFFIL001")
        await services.checkout.purchase(Decimal("300"), "c2@x.com", "AFFIL001")
        await services.checkout.purchase(Decimal("40"), "c3@x.com")
        await services.admin.review_sale(first.sale.id, "approve")

        overview = await services.admin.overview()

        assert overview.total_affiliates == 1
        assert overview.total_sales == 3
        assert overview.pending_sales == 2
        assert overview.approved_sales == 1
        assert overview.total_commission == Decimal("20")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action, status",
        [("approve", SaleStatus.APPROVED), ("REJECT", SaleStatus.REJECTED)],
    )
    async def test_review_keeps_counters(self, services, memory_store, seed, action, status):
        affiliate = await seed(memory_store, "a@test.com", "AFFIL001")
        result = await services.checkout.purchase(Decimal("100"), "c@x.com", "AFFIL001")

        sale = await services.admin.review_sale(result.sale.id, action)

        assert sale.status == status
        assert sale.processed_at is not None
        stored = await memory_store.find_by_id(affiliate.id)
        assert stored.total_earnings == Decimal("20")
        assert stored.total_sales == 1

    @pytest.mark.asyncio
    async def test_unknown_action(self, services):
        result = await services.checkout.purchase(Decimal("10"), "c@x.com")

        with pytest.raises(ValidationError):
            await services.admin.review_sale(result.sale.id, "refund")

    @pytest.mark.asyncio
    async def test_unknown_sale(self, services):
        with pytest.raises(NotFoundError):
            await services.admin.review_sale(999, "approve")
