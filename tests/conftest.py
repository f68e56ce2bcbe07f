# Shared fixtures for GuardFX tests.
# FakeBackend stands in for the backend command boundary and records every
# call so tests can assert on round trips.

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from guardfx.core.backend import BackendError


class FakeBackend:
    """In-memory backend with switchable failures."""

    def __init__(self, secrets: list[dict[str, Any]] | None = None) -> None:
        self.secrets: list[dict[str, Any]] = [dict(s) for s in (secrets or [])]
        self.time = 95
        self.code = "ABCDE"
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_time: Exception | None = None
        self.fail_code: Exception | None = None
        self.fail_list: Exception | None = None
        self.fail_add: Exception | None = None
        self.fail_delete: Exception | None = None

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    async def get_current_time(self) -> int:
        self.calls.append(("get_current_time", ()))
        if self.fail_time:
            raise self.fail_time
        return self.time

    async def generate_code(self, secret: str, time: int | None = None) -> str:
        self.calls.append(("generate_code", (secret, time)))
        if self.fail_code:
            raise self.fail_code
        return self.code

    async def list_secrets(self) -> list[dict[str, Any]]:
        self.calls.append(("list_secrets", ()))
        if self.fail_list:
            raise self.fail_list
        return [dict(s) for s in self.secrets]

    async def add_secret(self, name: str, secret: str) -> list[dict[str, Any]]:
        self.calls.append(("add_secret", (name, secret)))
        if self.fail_add:
            raise self.fail_add
        self.secrets.append({"name": name, "shared_secret": secret})
        return [dict(s) for s in self.secrets]

    async def delete_secret(self, index: int) -> list[dict[str, Any]]:
        self.calls.append(("delete_secret", (index,)))
        if self.fail_delete:
            raise self.fail_delete
        if not 0 <= index < len(self.secrets):
            raise BackendError(f"No account at position {index}")
        del self.secrets[index]
        return [dict(s) for s in self.secrets]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Backend with three stored accounts."""
    return FakeBackend(
        [
            {"name": "Main", "shared_secret": "c2VjcmV0MQ=="},
            {"name": "Alt", "shared_secret": "c2VjcmV0Mg=="},
            {"name": "Trading", "shared_secret": "c2VjcmV0Mw=="},
        ]
    )


@pytest.fixture
def empty_backend() -> FakeBackend:
    """Backend with no stored accounts."""
    return FakeBackend()


@pytest.fixture
def make_backend() -> type[FakeBackend]:
    """The FakeBackend class, for tests that need a custom setup."""
    return FakeBackend
