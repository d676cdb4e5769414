"""Tests for the ordered provider fallback chain."""

import asyncio

import httpx
import pytest

from app.clients import ProviderError
from app.services import FALLBACK_SOURCE, Attempt, FallbackChain


def returning(value):
    async def fetch():
        return value
    return fetch


def raising(exc):
    async def fetch():
        raise exc
    return fetch


class TestFallbackChain:
    """Tests for FallbackChain.resolve."""

    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        calls = []

        async def second():
            calls.append("second")
            return 2

        chain = FallbackChain("test", [Attempt("first", returning(1)), Attempt("second", second)], 0)
        result = await chain.resolve()

        assert result.value == 1
        assert result.source == "first"
        assert result.errors == {}
        assert not result.is_fallback
        assert calls == []

    @pytest.mark.asyncio
    async def test_falls_through_provider_errors(self):
        chain = FallbackChain(
            "test",
            [
                Attempt("http", raising(httpx.ConnectError("refused"))),
                Attempt("payload", raising(ProviderError("bad payload"))),
                Attempt("third", returning(3)),
            ],
            default=0,
        )
        result = await chain.resolve()

        assert result.value == 3
        assert result.source == "third"
        assert set(result.errors) == {"http", "payload"}
        assert result.errors["payload"] == "bad payload"

    @pytest.mark.asyncio
    async def test_none_counts_as_no_data(self):
        chain = FallbackChain("test", [Attempt("empty", returning(None))], default=7)
        result = await chain.resolve()

        assert result.value == 7
        assert result.errors == {"empty": "no data"}

    @pytest.mark.asyncio
    async def test_all_fail_uses_default(self):
        chain = FallbackChain("test", [Attempt("a", raising(ProviderError("x")))], default="constant")
        result = await chain.resolve()

        assert result.value == "constant"
        assert result.source == FALLBACK_SOURCE
        assert result.is_fallback

    @pytest.mark.asyncio
    async def test_empty_chain_uses_default(self):
        result = await FallbackChain("test", [], default=1).resolve()
        assert result.is_fallback

    @pytest.mark.asyncio
    async def test_timeout_moves_on(self):
        async def slow():
            await asyncio.sleep(5)
            return "slow"

        chain = FallbackChain(
            "test",
            [Attempt("slow", slow), Attempt("fast", returning("fast"))],
            default=None,
            timeout=0.05,
        )
        result = await chain.resolve()

        assert result.value == "fast"
        assert "slow" in result.errors

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self):
        chain = FallbackChain("test", [Attempt("buggy", raising(KeyError("oops")))], default=0)
        with pytest.raises(KeyError):
            await chain.resolve()
