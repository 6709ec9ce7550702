"""
Process-wide reward client.

Wires the auth state machine, the eligibility engine and the claim sequencer
together and remembers the last user-displayable error.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from src.core.exceptions.base import (
    AlreadyClaimedError, ClientError, FetchError, InvalidStateError
)
from src.core.logger.logger import get_logger
from src.core.service.auth.auth_state_machine import AuthStateMachine
from src.core.service.auth.cache.session_store import SessionStore
from src.core.service.auth.models.session import AppState, Identity
from src.core.service.gateway.base import RewardGateway
from src.core.service.gateway.models import AdminOverview
from src.core.service.rewards.claim_sequencer import ClaimSequence, ClaimSequencer
from src.core.service.rewards.eligibility import RewardEligibilityEngine
from src.core.service.rewards.models import RewardStats, SequenceSnapshot
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

VIEWS = {
    AppState.LOADING: "loading",
    AppState.LOGGED_OUT: "login",
    AppState.AWAITING_PIN: "pin",
    AppState.AUTHENTICATED: "dashboard",
    AppState.CLAIM_IN_PROGRESS: "claim",
}


class RewardClient:
    """Facade the presentation layer drives"""

    def __init__(
        self,
        gateway: RewardGateway,
        session_store: SessionStore,
        sequencer: Optional[ClaimSequencer] = None,
        claim_duration_ms: int = settings.CLAIM_DURATION_MS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.gateway = gateway
        self.auth = AuthStateMachine(gateway, session_store)
        self.rewards = RewardEligibilityEngine(gateway, clock)
        self.sequencer = sequencer or ClaimSequencer()
        self.claim_duration_ms = claim_duration_ms
        self.last_error: Optional[str] = None
        self._sequence: Optional[ClaimSequence] = None

    @property
    def state(self) -> AppState:
        return self.auth.state

    @property
    def identity(self) -> Optional[Identity]:
        return self.auth.identity

    @property
    def claim_sequence(self) -> Optional[ClaimSequence]:
        return self._sequence

    def view(self, admin: bool = False) -> str:
        return "admin" if admin else VIEWS[self.state]

    def clear_error(self) -> None:
        self.last_error = None

    @asynccontextmanager
    async def _surface_errors(self):
        """Remember a failure for the UI; a success clears the previous one"""
        try:
            yield
        except ClientError as e:
            self.last_error = e.message
            raise
        self.last_error = None

    def _require_identity(self, action: str) -> Identity:
        if self.identity is None:
            raise InvalidStateError(details={"action": action, "state": self.state.value})
        return self.identity

    async def start(self) -> AppState:
        state = await self.auth.start()
        if state == AppState.AUTHENTICATED:
            await self._refresh_stats_quietly()
        return state

    async def _refresh_stats_quietly(self) -> None:
        """Stats failures on entry keep the user signed in; the UI offers a retry"""
        try:
            await self.rewards.load_stats(self.identity)
        except FetchError as e:
            self.last_error = e.message

    async def submit_login(self, phone: str, password: str) -> AppState:
        async with self._surface_errors():
            return await self.auth.submit_login(phone, password)

    async def submit_pin(self, pin: str) -> Identity:
        async with self._surface_errors():
            identity = await self.auth.submit_pin(pin)
        self.rewards.reset()
        await self._refresh_stats_quietly()
        return identity

    def back(self) -> AppState:
        self.last_error = None
        return self.auth.back()

    async def logout(self) -> AppState:
        if self._sequence is not None:
            self._sequence.cancel()
            self._sequence = None
        try:
            async with self._surface_errors():
                return await self.auth.logout()
        finally:
            self.rewards.reset()

    async def load_stats(self) -> RewardStats:
        identity = self._require_identity("stats")
        async with self._surface_errors():
            return await self.rewards.load_stats(identity)

    def can_claim_today(self, now: Optional[datetime] = None) -> bool:
        return self.rewards.is_eligible(now)

    async def start_claim(self) -> ClaimSequence:
        """
        Start the claim animation; the reward is committed when it completes.

        Raises:
            AlreadyClaimedError: Today's reward was already collected
            InvalidStateError: Not signed in, or a claim is already running
        """
        identity = self._require_identity("claim")
        async with self._surface_errors():
            if self.state != AppState.AUTHENTICATED:
                raise InvalidStateError(details={"action": "claim", "state": self.state.value})
            if self.rewards.stats is None:
                await self.rewards.load_stats(identity)
            if not self.rewards.is_eligible():
                raise AlreadyClaimedError()

            self.auth.begin_claim()

        sequence: Optional[ClaimSequence] = None

        async def on_complete() -> None:
            await self._finish_claim(identity, sequence)

        sequence = self.sequencer.start(self.claim_duration_ms, on_complete)
        self._sequence = sequence
        logger.info("Claim started", extra={"phone": identity.phone})
        return sequence

    async def _finish_claim(self, identity: Identity, sequence: ClaimSequence) -> None:
        # A sequence dropped by logout must not touch the state of a newer claim
        try:
            await self.rewards.commit_claim(identity)
            if self._sequence is sequence:
                self.last_error = None
        except ClientError as e:
            # Eligibility is untouched on failure; the user can claim again
            if self._sequence is sequence:
                self.last_error = e.message
            logger.warning("Claim not committed", extra={"phone": identity.phone, "error_code": e.code})
        finally:
            if self._sequence is sequence:
                self.auth.end_claim()

    def claim_snapshot(self) -> Optional[SequenceSnapshot]:
        return self._sequence.snapshot if self._sequence is not None else None

    def cancel_claim(self) -> bool:
        if self._sequence is None:
            raise InvalidStateError("No claim is in progress", details={"action": "cancel_claim"})

        cancelled = self._sequence.cancel()
        if cancelled:
            self.auth.end_claim()
        return cancelled

    async def get_admin_overview(self) -> AdminOverview:
        async with self._surface_errors():
            try:
                return await self.gateway.get_all_users()
            except ClientError:
                raise
            except Exception as e:
                logger.error("Error loading admin data", extra={"error": str(e)})
                raise FetchError("Failed to load admin data") from e

    async def service_health(self) -> Dict[str, Any]:
        return await self.gateway.health_check()

    async def shutdown(self) -> None:
        if self._sequence is not None:
            self._sequence.cancel()
            await self._sequence.wait()
        await self.gateway.close()
