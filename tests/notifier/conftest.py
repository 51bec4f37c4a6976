import os

import pytest
from notifier.cache import reset_cache
from notifier.cache.fake_cache import FakeCacheAdapter
from notifier.consumer import get_registry, reset_registry
from notifier.publishing import reset_publisher
from notifier.publishing.fake_publisher import FakePublisher
from notifier.settings import Settings
from notifier.wiring import build_services


@pytest.fixture(scope="session")
def _notifier_domain(request):
    """Initialize the notifier domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from notifier.domain import notifier

    notifier.init()
    return notifier


@pytest.fixture(autouse=True)
def run_around_tests(_notifier_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _notifier_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    reset_cache()
    reset_publisher()
    reset_registry()
    ctx.pop()


@pytest.fixture()
def fake_cache():
    return FakeCacheAdapter()


@pytest.fixture()
def fake_publisher():
    return FakePublisher()


@pytest.fixture()
def services(fake_cache, fake_publisher):
    return build_services(Settings(), cache=fake_cache, publisher=fake_publisher)


@pytest.fixture()
def registry(services):
    """The registry the broker subscribers deliver to, wired to the fake adapters."""
    return get_registry(services)
