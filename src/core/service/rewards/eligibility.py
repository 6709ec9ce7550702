"""
Daily reward eligibility.

A claim is allowed once per UTC calendar day. The day boundary is UTC midnight
for every user, regardless of their timezone.
"""

from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

from src.core.exceptions.base import AlreadyClaimedError, ClaimError, ClientError, FetchError, InvalidStateError
from src.core.logger.logger import get_logger
from src.core.service.auth.models.session import Identity
from src.core.service.gateway.base import RewardGateway
from src.core.service.rewards.models import RewardStats

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_day(value: Union[datetime, date, str]) -> str:
    """
    Truncate a moment to its UTC calendar date as YYYY-MM-DD.
    Naive datetimes are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text).isoformat()
        return utc_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        # Leave unknown formats to a plain date-prefix comparison
        return text[:10]


class RewardEligibilityEngine:
    """Owns the signed-in user's reward stats and the one-claim-per-day rule"""

    def __init__(self, gateway: RewardGateway, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self.clock = clock or utc_now
        self.stats: Optional[RewardStats] = None
        self._owner: Optional[str] = None  # phone the stats belong to
        self._generation = 0  # bumped on every reset

    @staticmethod
    def can_claim_today(stats: RewardStats, now: datetime) -> bool:
        """True iff nothing was claimed on now's UTC calendar date"""
        if not stats.last_reward_claim:
            return True
        return utc_day(stats.last_reward_claim) != utc_day(now)

    def is_eligible(self, now: Optional[datetime] = None) -> bool:
        if self.stats is None:
            return False
        return self.can_claim_today(self.stats, now or self.clock())

    def reset(self) -> None:
        self.stats = None
        self._owner = None
        self._generation += 1

    async def load_stats(self, identity: Identity) -> RewardStats:
        """
        Fetch current stats for identity.

        Raises:
            FetchError: The service could not be read; previous stats are kept
        """
        try:
            stats = await self.gateway.get_user_stats(identity.phone)
        except ClientError as e:
            logger.warning("Error loading user stats", extra={"phone": identity.phone, "error": e.message})
            raise
        except Exception as e:
            logger.error("Error loading user stats", extra={"phone": identity.phone, "error": str(e)})
            raise FetchError("Failed to load user stats") from e

        self.stats = stats
        self._owner = identity.phone
        logger.info(
            "User stats loaded",
            extra={
                "phone": identity.phone,
                "total_rewards": stats.total_rewards,
                "last_reward_claim": stats.last_reward_claim
            }
        )
        return stats

    async def commit_claim(self, identity: Identity, now: Optional[datetime] = None) -> RewardStats:
        """
        Record today's claim with the reward service and merge the new counters.

        Eligibility is re-checked right before the network call, so a sequence that
        crossed UTC midnight or a stale check cannot claim twice.

        Raises:
            InvalidStateError: Stats were not loaded for this identity
            AlreadyClaimedError: Today's reward was already claimed (no network call)
            ClaimError: The commit failed; local stats are unchanged
        """
        if self.stats is None or self._owner != identity.phone:
            raise InvalidStateError("Reward stats are not loaded", details={"action": "claim"})

        now = now or self.clock()
        if not self.can_claim_today(self.stats, now):
            logger.info(
                "Claim rejected, already claimed today",
                extra={"phone": identity.phone, "last_reward_claim": self.stats.last_reward_claim}
            )
            raise AlreadyClaimedError()

        generation = self._generation
        try:
            result = await self.gateway.collect_reward(identity.phone)
        except ClientError as e:
            logger.error("Error collecting reward", extra={"phone": identity.phone, "error": e.message})
            raise
        except Exception as e:
            logger.error("Error collecting reward", extra={"phone": identity.phone, "error": str(e)})
            raise ClaimError() from e

        # The session may have ended, or been replaced, while the commit was in flight
        if self._generation != generation or self._owner != identity.phone:
            logger.warning("Claim recorded after session ended", extra={"phone": identity.phone})
            raise InvalidStateError("Session ended before the claim completed")

        claimed_day = utc_day(result.last_claimed) if result.last_claimed else utc_day(now)
        self.stats = self.stats.model_copy(update={
            "total_rewards": result.total_rewards,
            "last_reward_claim": claimed_day,
        })

        logger.info(
            "Reward collected",
            extra={
                "phone": identity.phone,
                "total_rewards": self.stats.total_rewards,
                "last_reward_claim": claimed_day
            }
        )
        return self.stats
