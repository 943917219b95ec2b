import pytest


@pytest.fixture
def anyio_backend():
    # The tile manager schedules fetches with asyncio tasks.
    return "asyncio"
