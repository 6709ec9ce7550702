from contextlib import contextmanager
from typing import Optional

from src.core.exceptions.base import (
    AuthError, ClientError, InvalidStateError, TransitionInProgressError
)
from src.core.logger.logger import get_logger
from src.core.service.auth.cache.session_store import SessionStore
from src.core.service.auth.models.session import AppState, Identity, TransientCredentials
from src.core.service.auth.validators import CredentialValidator
from src.core.service.gateway.base import RewardGateway

logger = get_logger(__name__)


class AuthStateMachine:
    """
    Drives Loading -> LoggedOut -> AwaitingPin -> Authenticated.

    Owns the transient credentials between the login and PIN steps and the
    signed-in Identity. Only one login/PIN submission may be in flight at a time.
    """

    def __init__(self, gateway: RewardGateway, session_store: SessionStore):
        self.gateway = gateway
        self.session_store = session_store
        self.state = AppState.LOADING
        self.identity: Optional[Identity] = None
        self._credentials: Optional[TransientCredentials] = None
        self._pending: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self._pending is not None

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    def _set_state(self, new_state: AppState) -> None:
        if new_state != self.state:
            logger.info(
                "State transition",
                extra={"from_state": self.state.value, "to_state": new_state.value}
            )
        self.state = new_state

    def _require_state(self, action: str, *states: AppState) -> None:
        if self.state not in states:
            raise InvalidStateError(
                details={"action": action, "state": self.state.value}
            )

    @contextmanager
    def _exclusive(self, action: str):
        """Reject a second submission while one is awaiting the network"""
        if self._pending is not None:
            logger.warning(
                f"Rejected {action} while {self._pending} is pending",
                extra={"state": self.state.value}
            )
            raise TransitionInProgressError(details={"action": action, "pending": self._pending})
        self._pending = action
        try:
            yield
        finally:
            self._pending = None

    async def start(self) -> AppState:
        """Resolve the startup state from the session store"""
        self._require_state("start", AppState.LOADING)

        try:
            identity = await self.session_store.read()
        except Exception as e:
            logger.error(
                "Error checking stored session, starting logged out",
                extra={"error": str(e)}
            )
            identity = None

        if identity:
            self.identity = identity
            self._set_state(AppState.AUTHENTICATED)
        else:
            self._set_state(AppState.LOGGED_OUT)
        return self.state

    async def submit_login(self, phone: str, password: str) -> AppState:
        """
        First auth step. On success the phone and password are held until the PIN step ends.

        Raises:
            ValidationError: Malformed phone or empty password (no network call)
            AuthError: Credentials rejected
            TransitionInProgressError: Another submission is pending
        """
        self._require_state("login", AppState.LOGGED_OUT)

        with self._exclusive("login"):
            normalized_phone = CredentialValidator.validate_login(phone, password)

            try:
                await self.gateway.login(normalized_phone, password)
            except ClientError as e:
                logger.warning("Login rejected", extra={"phone": normalized_phone, "error": e.message})
                raise
            except Exception as e:
                logger.error("Login failed", extra={"phone": normalized_phone, "error": str(e)})
                raise AuthError() from e

            self._credentials = TransientCredentials(phone=normalized_phone, password=password)
            self._set_state(AppState.AWAITING_PIN)
            return self.state

    async def submit_pin(self, pin: str) -> Identity:
        """
        Second auth step. On success the identity is persisted and credentials are dropped.

        Raises:
            ValidationError: PIN is not exactly 6 digits (no network call)
            AuthError: PIN rejected; credentials are kept so the PIN can be re-entered
            TransitionInProgressError: Another submission is pending
            InvalidStateError: The PIN step was abandoned while verification was pending
        """
        self._require_state("verify_pin", AppState.AWAITING_PIN)

        with self._exclusive("verify_pin"):
            pin = CredentialValidator.validate_pin_input(pin)
            credentials = self._credentials

            try:
                identity = await self.gateway.verify_pin(credentials.phone, pin)
            except ClientError as e:
                logger.warning("PIN rejected", extra={"phone": credentials.phone, "error": e.message})
                raise
            except Exception as e:
                logger.error("PIN verification failed", extra={"phone": credentials.phone, "error": str(e)})
                raise AuthError("PIN verification failed. Please try again.") from e

            # back() may have run while the gateway call was pending
            if self.state != AppState.AWAITING_PIN or self._credentials is not credentials:
                logger.warning("Discarding PIN result for abandoned login", extra={"phone": credentials.phone})
                raise InvalidStateError("Session expired. Please login again.")

            try:
                await self.session_store.write(identity)
            except Exception as e:
                logger.error("Failed to persist session", extra={"phone": identity.phone, "error": str(e)})
                raise AuthError("Could not save your session. Please try again.") from e

            self.identity = identity
            self._credentials = None
            self._set_state(AppState.AUTHENTICATED)
            return identity

    def back(self) -> AppState:
        """Abandon the PIN step"""
        self._require_state("back", AppState.AWAITING_PIN)
        self._credentials = None
        self._set_state(AppState.LOGGED_OUT)
        return self.state

    async def logout(self) -> AppState:
        """
        End the session. In-memory state is always cleared.

        Raises:
            AuthError: The stored session could not be removed
        """
        self._require_state("logout", AppState.AUTHENTICATED, AppState.CLAIM_IN_PROGRESS)
        phone = self.identity.phone if self.identity else None

        try:
            await self.session_store.clear()
        except Exception as e:
            logger.error("Failed to clear stored session", extra={"phone": phone, "error": str(e)})
            raise AuthError("Could not clear your saved session. Please try logging out again later.") from e
        finally:
            self.identity = None
            self._credentials = None
            self._set_state(AppState.LOGGED_OUT)

        logger.info("Logged out", extra={"phone": phone})
        return self.state

    def begin_claim(self) -> None:
        self._require_state("claim", AppState.AUTHENTICATED)
        self._set_state(AppState.CLAIM_IN_PROGRESS)

    def end_claim(self) -> None:
        """Return to Authenticated; no-op if the session already ended"""
        if self.state == AppState.CLAIM_IN_PROGRESS:
            self._set_state(AppState.AUTHENTICATED)
