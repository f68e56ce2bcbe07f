# Code client tests.
# Validates that backend failures are wrapped into client errors and that
# the pending counter is balanced on every path.

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from guardfx.core.client import (
    CodeClient,
    CodeClientError,
    CodeGenerationError,
    TimeSourceError,
)


def run_async(coro):
    """Helper to run async coroutines in sync tests."""
    return asyncio.run(coro)


class TestFetchServerTime:
    """Tests for time round trips."""

    @pytest.mark.unit
    def test_returns_backend_time(self, fake_backend: Any) -> None:
        """The backend clock is returned as an int."""
        client = CodeClient(fake_backend)
        assert run_async(client.fetch_server_time()) == 95
        assert client.pending == 0

    @pytest.mark.unit
    def test_failure_raises_time_source_error(self, fake_backend: Any) -> None:
        """Backend failures surface as TimeSourceError."""
        fake_backend.fail_time = OSError("no route to host")
        client = CodeClient(fake_backend)

        with pytest.raises(TimeSourceError, match="no route to host"):
            run_async(client.fetch_server_time())
        assert client.pending == 0

    @pytest.mark.unit
    def test_empty_message_gets_default(self, fake_backend: Any) -> None:
        """An exception with no text still produces a readable message."""
        fake_backend.fail_time = RuntimeError()
        client = CodeClient(fake_backend)

        with pytest.raises(TimeSourceError, match="Time source unavailable"):
            run_async(client.fetch_server_time())


class TestGenerateCode:
    """Tests for code round trips."""

    @pytest.mark.unit
    def test_passes_secret_and_time(self, fake_backend: Any) -> None:
        """Secret and time are forwarded unchanged."""
        client = CodeClient(fake_backend)

        assert run_async(client.generate_code("c2VjcmV0MQ==", 120)) == "ABCDE"
        assert fake_backend.calls_to("generate_code") == [("c2VjcmV0MQ==", 120)]

    @pytest.mark.unit
    def test_time_defaults_to_none(self, fake_backend: Any) -> None:
        """Without a time the backend picks its own clock."""
        client = CodeClient(fake_backend)
        run_async(client.generate_code("c2VjcmV0MQ=="))
        assert fake_backend.calls_to("generate_code") == [("c2VjcmV0MQ==", None)]

    @pytest.mark.unit
    def test_failure_raises_generation_error(self, fake_backend: Any) -> None:
        """A rejected secret surfaces as CodeGenerationError."""
        fake_backend.fail_code = ValueError("Failed to decode Base64: bad")
        client = CodeClient(fake_backend)

        with pytest.raises(CodeGenerationError) as exc_info:
            run_async(client.generate_code("nope"))

        assert isinstance(exc_info.value, CodeClientError)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert client.pending == 0

    @pytest.mark.unit
    def test_pending_counts_in_flight(self, fake_backend: Any) -> None:
        """pending is non-zero only while a request is outstanding."""
        client = CodeClient(fake_backend)
        seen: list[int] = []
        original = fake_backend.generate_code

        async def spy(secret: str, time: int | None = None) -> str:
            seen.append(client.pending)
            return await original(secret, time)

        fake_backend.generate_code = spy
        run_async(client.generate_code("c2VjcmV0MQ==", 95))

        assert seen == [1]
        assert client.pending == 0
