"""Builds the pipeline's collaborators from settings."""

from dataclasses import dataclass

from notifier.cache import get_cache
from notifier.metrics import PipelineMetrics
from notifier.notification.listing_cache import ListingCache
from notifier.notification.outbound import OutboundPublisher
from notifier.notification.pipeline import NotificationPipeline
from notifier.notification.service import NotificationService
from notifier.notification.store import NotificationStore
from notifier.preference.gate import PreferenceGate
from notifier.preference.management import PreferenceService
from notifier.profile.cache import SenderProfileCache
from notifier.publishing import get_publisher
from notifier.settings import Settings


@dataclass
class NotifierServices:
    settings: Settings
    metrics: PipelineMetrics
    preferences: PreferenceService
    profiles: SenderProfileCache
    store: NotificationStore
    listing_cache: ListingCache
    outbound: OutboundPublisher
    notifications: NotificationService
    gate: PreferenceGate
    pipeline: NotificationPipeline


def build_services(settings=None, cache=None, publisher=None, metrics=None) -> NotifierServices:
    """Assemble the services. Cache and publisher default to the configured adapters."""
    settings = settings or Settings.from_env()
    metrics = metrics or PipelineMetrics()
    cache = cache if cache is not None else get_cache(settings)
    publisher = publisher if publisher is not None else get_publisher(settings)

    preferences = PreferenceService()
    profiles = SenderProfileCache()
    store = NotificationStore(
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
    listing_cache = ListingCache(
        cache,
        metrics=metrics,
        listing_ttl=settings.listing_cache_ttl,
        unread_count_ttl=settings.unread_count_cache_ttl,
    )
    outbound = OutboundPublisher(
        publisher,
        profiles=profiles,
        exchange=settings.outbound_exchange,
        metrics=metrics,
    )
    notifications = NotificationService(
        store,
        listing_cache,
        outbound,
        profiles=profiles,
        metrics=metrics,
        retention_days=settings.notification_retention_days,
    )
    gate = PreferenceGate(preferences)
    pipeline = NotificationPipeline(notifications, gate, metrics=metrics)

    return NotifierServices(
        settings=settings,
        metrics=metrics,
        preferences=preferences,
        profiles=profiles,
        store=store,
        listing_cache=listing_cache,
        outbound=outbound,
        notifications=notifications,
        gate=gate,
        pipeline=pipeline,
    )
