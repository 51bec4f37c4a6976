"""Notifier bounded context — turns social-platform events into notifications.

Consumes events from the user, post, event, social-graph and messaging
services, maps them to per-user notifications, filters them through each
recipient's delivery preferences, stores them, and announces every new
notification on the outbound `notification_events` exchange.
"""

import structlog
from protean.domain import Domain

notifier = Domain(name="notifier")

logger = structlog.get_logger(__name__)
