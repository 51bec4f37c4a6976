"""PurgeStaleSenderProfiles command + handler — drops profiles not synced recently."""

from datetime import UTC, datetime

from notifier.domain import notifier
from notifier.profile.cache import SenderProfileCache
from notifier.profile.profile import SenderProfile
from notifier.settings import Settings
from protean.fields import DateTime, Integer
from protean.utils.mixins import handle


@notifier.command(part_of="SenderProfile")
class PurgeStaleSenderProfiles:
    older_than_days: Integer(min_value=0)  # Defaults to PROFILE_RETENTION_DAYS
    as_of: DateTime()


@notifier.command_handler(part_of=SenderProfile)
class SenderProfileRetentionHandler:
    @handle(PurgeStaleSenderProfiles)
    def purge_stale_profiles(self, command: PurgeStaleSenderProfiles):
        days = command.older_than_days
        if days is None:
            days = Settings.from_env().profile_retention_days
        return SenderProfileCache().cleanup_stale(days, now=command.as_of or datetime.now(UTC))
