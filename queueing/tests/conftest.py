import pytest

from queueing.context import get_context


@pytest.fixture(autouse=True)
def fresh_context():
    """Drop cached access rules and queue types between tests."""
    get_context().invalidate()
    yield
    get_context().invalidate()
