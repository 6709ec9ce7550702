"""
Shared test configuration and fixtures.
"""

from unittest.mock import AsyncMock

import pytest

from src.core.service.auth.auth_state_machine import AuthStateMachine
from src.core.service.auth.cache.session_store import InMemorySessionStore
from src.core.service.auth.models.session import Identity
from src.core.service.gateway.base import RewardGateway
from src.core.service.rewards.models import ClaimResult, RewardStats

from tests.constants import TEST_PHONE


@pytest.fixture
def identity():
    return Identity(
        id="user-1",
        phone=TEST_PHONE,
        name="Alice",
        created_at="2023-12-01T09:00:00Z",
        last_login="2024-01-01T08:00:00Z"
    )


@pytest.fixture
def stats():
    return RewardStats(
        total_rewards=5,
        last_reward_claim="2023-12-31",
        join_date="2023-12-01",
        last_login="2024-01-01"
    )


@pytest.fixture
def gateway(identity, stats):
    """Reward service double with happy-path defaults"""
    mock = AsyncMock(spec=RewardGateway)
    mock.login.return_value = None
    mock.verify_pin.return_value = identity
    mock.get_user_stats.return_value = stats
    mock.collect_reward.return_value = ClaimResult(total_rewards=6, last_claimed="2024-01-01")
    mock.get_all_users.return_value = None
    mock.health_check.return_value = {"status": "ok"}
    return mock


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
async def state_machine(gateway, session_store):
    machine = AuthStateMachine(gateway, session_store)
    await machine.start()
    return machine
