import pytest

from samples import FakeAccessor


@pytest.fixture
def accessor():
    return FakeAccessor()
