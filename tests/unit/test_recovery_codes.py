"""Tests for recovery code generation and the in-memory store."""

from __future__ import annotations

import asyncio

import pytest

from cqrs_ddd_twofactor import (
    InMemoryRecoveryCodeStore,
    InvalidSubjectError,
    Login,
    RandomRecoveryCodeGenerator,
    TwoFactorConfig,
    normalize_recovery_code,
)
from cqrs_ddd_twofactor.recovery_codes import generate_recovery_code_batch


class RepeatingGenerator:
    def generate(self) -> str:
        return "SAME-CODE"


class TestNormalization:
    @pytest.mark.parametrize(
        "raw",
        ["ABCD-EFGH", "abcd-efgh", "ABCDEFGH", " abcd efgh ", "ab-cd-ef-gh"],
    )
    def test_equivalent_inputs(self, raw: str) -> None:
        assert normalize_recovery_code(raw) == "ABCD-EFGH"

    def test_blank_input(self) -> None:
        assert normalize_recovery_code("  - ") == ""


class TestRandomRecoveryCodeGenerator:
    def test_generated_code_format(self) -> None:
        code = RandomRecoveryCodeGenerator().generate()

        # Codes are formatted as "XXXX-XXXX" (8 chars + dash = 9 total)
        assert len(code) == 9
        assert code[4] == "-"
        assert all(c in RandomRecoveryCodeGenerator.ALPHABET for c in code.replace("-", ""))

    def test_alphabet_excludes_ambiguous_characters(self) -> None:
        for ambiguous in "O0I1":
            assert ambiguous not in RandomRecoveryCodeGenerator.ALPHABET

    def test_custom_length(self) -> None:
        code = RandomRecoveryCodeGenerator(code_length=12).generate()

        assert code.count("-") == 2
        assert len(code.replace("-", "")) == 12

    def test_rejects_non_positive_length(self) -> None:
        with pytest.raises(ValueError):
            RandomRecoveryCodeGenerator(code_length=0)

    def test_batch_is_unique(self) -> None:
        codes = generate_recovery_code_batch(RandomRecoveryCodeGenerator(), 50)

        assert len(set(codes)) == 50

    def test_batch_gives_up_on_repeating_generator(self) -> None:
        with pytest.raises(ValueError, match="distinct codes"):
            generate_recovery_code_batch(RepeatingGenerator(), 3)


class TestInMemoryRecoveryCodeStore:
    @pytest.fixture
    def store(self) -> InMemoryRecoveryCodeStore:
        return InMemoryRecoveryCodeStore()

    @pytest.mark.asyncio
    async def test_create_returns_batch_of_ten(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        codes = await store.create_recovery_codes_for_login("mylogin")

        assert len(codes) == 10
        assert len(set(codes)) == 10
        assert await store.get_all_recovery_codes_for_login("mylogin") == codes
        assert await store.get_remaining_count("mylogin") == 10

    @pytest.mark.asyncio
    async def test_create_replaces_previous_batch(self, static_generator) -> None:
        store = InMemoryRecoveryCodeStore(generator=static_generator, count=2)
        first = await store.create_recovery_codes_for_login("mylogin")
        second = await store.create_recovery_codes_for_login("mylogin")

        assert first == ["CODE-0001", "CODE-0002"]
        assert second == ["CODE-0003", "CODE-0004"]
        assert await store.get_all_recovery_codes_for_login("mylogin") == second
        assert not await store.consume_recovery_code("mylogin", first[0])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("login", ["", "anonymous", Login.anonymous()])
    async def test_create_rejects_invalid_subject(
        self, store: InMemoryRecoveryCodeStore, login: object
    ) -> None:
        with pytest.raises(InvalidSubjectError):
            await store.create_recovery_codes_for_login(login)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_unknown_login_has_no_codes(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        assert await store.get_all_recovery_codes_for_login("unknown") == []
        assert await store.get_all_recovery_codes_for_login("") == []
        assert await store.get_remaining_count("unknown") == 0

    @pytest.mark.asyncio
    async def test_consume_is_single_use(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        codes = await store.create_recovery_codes_for_login("mylogin")

        assert await store.consume_recovery_code("mylogin", codes[0])
        assert not await store.consume_recovery_code("mylogin", codes[0])
        assert await store.get_all_recovery_codes_for_login("mylogin") == codes[1:]

    @pytest.mark.asyncio
    async def test_consume_other_login_code_has_no_side_effect(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        codes1 = await store.create_recovery_codes_for_login("mylogin1")
        await store.create_recovery_codes_for_login("mylogin2")

        assert not await store.consume_recovery_code("mylogin2", codes1[0])
        assert await store.get_all_recovery_codes_for_login("mylogin1") == codes1

    @pytest.mark.asyncio
    async def test_consume_invalid_input(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        await store.create_recovery_codes_for_login("mylogin")

        assert not await store.consume_recovery_code("mylogin", "INVALID")
        assert not await store.consume_recovery_code("mylogin", "")
        assert not await store.consume_recovery_code("anonymous", "INVALID")
        assert await store.get_remaining_count("mylogin") == 10

    @pytest.mark.asyncio
    async def test_concurrent_consume_has_one_winner(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        codes = await store.create_recovery_codes_for_login("mylogin")

        results = await asyncio.gather(
            *(store.consume_recovery_code("mylogin", codes[3]) for _ in range(20))
        )

        assert results.count(True) == 1
        assert await store.get_remaining_count("mylogin") == 9

    @pytest.mark.asyncio
    async def test_delete_all_is_idempotent(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        await store.create_recovery_codes_for_login("mylogin")

        await store.delete_all_recovery_codes_for_login("mylogin")
        await store.delete_all_recovery_codes_for_login("mylogin")
        await store.delete_all_recovery_codes_for_login("anonymous")

        assert await store.get_all_recovery_codes_for_login("mylogin") == []

    @pytest.mark.asyncio
    async def test_insert_recovery_code(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        await store.insert_recovery_code("mylogin", "abcd-efgh")
        await store.insert_recovery_code("mylogin", "ABCDEFGH")
        await store.insert_recovery_code("mylogin", "wxyz-2345")

        assert await store.get_all_recovery_codes_for_login("mylogin") == [
            "ABCD-EFGH",
            "WXYZ-2345",
        ]

    @pytest.mark.asyncio
    async def test_insert_rejects_anonymous(
        self, store: InMemoryRecoveryCodeStore
    ) -> None:
        with pytest.raises(InvalidSubjectError):
            await store.insert_recovery_code("anonymous", "ABCD-EFGH")

    @pytest.mark.asyncio
    async def test_from_config(self) -> None:
        config = TwoFactorConfig(recovery_code_count=4, recovery_code_length=12)
        store = InMemoryRecoveryCodeStore.from_config(config)

        codes = await store.create_recovery_codes_for_login("mylogin")

        assert len(codes) == 4
        assert all(len(code.replace("-", "")) == 12 for code in codes)
