"""Publisher adapter registry.

Singleton access to the outbound publisher. Publishes through the domain's
Protean broker by default; ``PUBLISHER_BACKEND=memory`` records messages
in memory instead.
"""

from notifier.settings import Settings

_publisher_instance = None


def get_publisher(settings: Settings | None = None):
    """Return the configured publisher adapter (singleton)."""
    global _publisher_instance

    if _publisher_instance is None:
        settings = settings or Settings.from_env()
        if settings.publisher_backend == "broker":
            from notifier.publishing.broker_publisher import BrokerPublisher

            _publisher_instance = BrokerPublisher()
        elif settings.publisher_backend == "memory":
            from notifier.publishing.fake_publisher import FakePublisher

            _publisher_instance = FakePublisher()
        else:
            raise ValueError(f"Unknown publisher backend: {settings.publisher_backend}")

    return _publisher_instance


def reset_publisher():
    """Reset the publisher singleton (useful for testing)."""
    global _publisher_instance
    _publisher_instance = None
