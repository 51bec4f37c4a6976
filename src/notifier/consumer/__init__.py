"""Consumer registry access.

Protean instantiates subscribers without arguments, so they reach the
registry through this singleton. The server and the tests prime it with
their own services before any message arrives.
"""

_registry_instance = None


def get_registry(services=None):
    """Return the consumer registry (singleton), building it on first use."""
    global _registry_instance

    if _registry_instance is None:
        from notifier.consumer.bindings import build_registry
        from notifier.wiring import build_services

        _registry_instance = build_registry(services or build_services())

    return _registry_instance


def reset_registry():
    """Reset the registry singleton (useful for testing)."""
    global _registry_instance
    _registry_instance = None
