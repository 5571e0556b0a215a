"""Unit tests for affiliate registration and login."""

import asyncio
import re

import pytest

from affiliate.services.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from affiliate.services.registration import AUTO_PASSWORD, normalize_email


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_affiliate_with_code(self, services, memory_store):
        affiliate = await services.registration.register("New@Example.com ", "secret123")

        assert affiliate.id is not None
        assert affiliate.email == "new@example.com"
        assert re.fullmatch(r"[0-9A-F]{8}", affiliate.discount_code)
        assert affiliate.password_hash != "secret123"
        code = await memory_store.find_by_code(affiliate.discount_code)
        assert code is not None
        assert code.affiliate_id == affiliate.id
        assert code.discount_percent == 10
        assert code.is_active

    @pytest.mark.asyncio
    async def test_parent_gets_recruit(self, services, memory_store):
        parent = await services.registration.register("p@example.com", "secret123")

        child = await services.registration.register(
            "c@example.com", "secret123", parent.discount_code
        )

        assert child.parent_id == parent.id
        assert child.parent_discount_code == parent.discount_code
        stored = await memory_store.find_by_id(parent.id)
        assert stored.total_recruits == 1
        assert stored.total_sales == 0

    @pytest.mark.asyncio
    async def test_unknown_parent_code_is_ignored(self, services):
        affiliate = await services.registration.register("c@example.com", "secret123", "NOPE0000")

        assert affiliate.parent_id is None
        assert affiliate.parent_discount_code is None

    @pytest.mark.asyncio
    async def test_duplicate_email(self, services):
        await services.registration.register("dup@example.com", "secret123")

        with pytest.raises(ConflictError):
            await services.registration.register("DUP@example.com", "other")

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_create_one_affiliate(self, services, memory_store):
        results = await asyncio.gather(
            services.registration.register("race@example.com", "secret123"),
            services.registration.register("race@example.com", "secret123"),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ConflictError)
        assert len(await memory_store.list_affiliates()) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("", "secret"), ("a@b.com", ""), ("not-an-email", "secret"), ("a@b.com", "x" * 73)],
    )
    async def test_rejects_bad_input(self, services, email, password):
        with pytest.raises(ValidationError):
            await services.registration.register(email, password)

    @pytest.mark.asyncio
    async def test_auto_generated_password(self, services):
        affiliate = await services.registration.register("auto@example.com", AUTO_PASSWORD)

        with pytest.raises(InvalidCredentialsError):
            await services.registration.authenticate("auto@example.com", AUTO_PASSWORD)
        assert affiliate.password_hash


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_login(self, services):
        created = await services.registration.register("u@example.com", "secret123")

        affiliate = await services.registration.authenticate(" U@example.com", "secret123")

        assert affiliate.id == created.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email, password", [("u@example.com", "wrong"), ("x@example.com", "secret123")])
    async def test_bad_credentials(self, services, email, password):
        await services.registration.register("u@example.com", "secret123")

        with pytest.raises(InvalidCredentialsError):
            await services.registration.authenticate(email, password)

    @pytest.mark.asyncio
    async def test_bad_credentials_are_unauthorized(self, services):
        await services.registration.register("u@example.com", "secret123")

        with pytest.raises(UnauthorizedError) as excinfo:
            await services.registration.authenticate("u@example.com", "wrong")

        assert excinfo.value.status_code == 401

    @pytest.mark.asyncio
    async def test_profile_not_found(self, services):
        with pytest.raises(NotFoundError):
            await services.registration.get_profile(404)


def test_normalize_email():
    assert normalize_email("  Mixed@Case.COM ") == "mixed@case.com"
    assert normalize_email(None) == ""
