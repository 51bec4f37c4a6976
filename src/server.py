"""Protean Engine runner for the notifier service.

Starts the Engine, which polls every inbound broker stream and hands each
message to its subscriber (one per routing key, see
``notifier.consumer.subscribers``).

Usage:
    python src/server.py                # Consume until interrupted
    python src/server.py --test-mode    # Process what is queued, then exit
"""

import argparse

import structlog
from notifier.consumer import get_registry
from notifier.domain import notifier
from notifier.settings import Settings
from notifier.utils.logging import configure_logging
from notifier.wiring import build_services
from protean.server.engine import Engine

logger = structlog.get_logger(__name__)


def _prepare_registry():
    """Build the registry against configured adapters before any message arrives."""
    with notifier.domain_context():
        return get_registry(build_services(Settings.from_env()))


def run(test_mode=False):
    notifier.init()
    registry = _prepare_registry()
    engine = Engine(notifier, test_mode=test_mode)

    for binding in registry.bindings:
        registry.mark_active(binding)
    logger.info("Notifier consumers starting", **registry.status())

    try:
        engine.run()
    finally:
        for binding in registry.bindings:
            registry.mark_inactive(binding)
        logger.info("Notifier consumers stopped", exit_code=engine.exit_code)

    return engine.exit_code


def main():
    parser = argparse.ArgumentParser(description="Notifier Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process queued messages and exit",
    )
    args = parser.parse_args()

    configure_logging()
    raise SystemExit(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
