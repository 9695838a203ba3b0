import pytest

from fakes import FakeProcessFactory, FakeSession

from brouter.models import Point


@pytest.fixture
def berlin():
    return Point(52.5200, 13.4050)


@pytest.fixture
def paris():
    return Point(48.8566, 2.3522)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def process_factory():
    return FakeProcessFactory()


@pytest.fixture
def sleeps():
    """Records readiness sleeps instead of sleeping."""
    return []
