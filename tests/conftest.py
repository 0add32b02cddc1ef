import pytest


@pytest.fixture
def anyio_backend() -> str:  # pragma: no cover - required by pytest-anyio
    return "asyncio"
