import asyncio
from unittest.mock import AsyncMock

import pytest

from src.core.exceptions.base import (
    AuthError, InvalidStateError, TransitionInProgressError, ValidationError
)
from src.core.service.auth.auth_state_machine import AuthStateMachine
from src.core.service.auth.models.session import AppState

from tests.constants import TEST_PASSWORD, TEST_PHONE, TEST_PIN


@pytest.mark.asyncio
async def test_start_without_stored_session(gateway, session_store):
    """Should start logged out when nothing is stored"""
    machine = AuthStateMachine(gateway, session_store)
    assert machine.state == AppState.LOADING

    assert await machine.start() == AppState.LOGGED_OUT
    assert machine.identity is None


@pytest.mark.asyncio
async def test_start_with_stored_session_skips_pin(gateway, session_store, identity):
    """Should go straight to Authenticated without re-running PIN verification"""
    await session_store.write(identity)
    machine = AuthStateMachine(gateway, session_store)

    assert await machine.start() == AppState.AUTHENTICATED
    assert machine.identity == identity
    gateway.verify_pin.assert_not_awaited()


@pytest.mark.asyncio
async def test_start_with_corrupt_session_clears_it(gateway, session_store):
    await session_store._set_raw("{not json")
    machine = AuthStateMachine(gateway, session_store)

    assert await machine.start() == AppState.LOGGED_OUT
    assert await session_store._get_raw() is None


@pytest.mark.asyncio
@pytest.mark.parametrize("phone", [
    "+14155550123",
    "14155550123",
    "+1 415 555 0123",
    "+44",
    "+123456789012345",
])
async def test_valid_phone_issues_exactly_one_login_call(state_machine, gateway, phone):
    await state_machine.submit_login(phone, TEST_PASSWORD)

    assert gateway.login.await_count == 1
    sent_phone, sent_password = gateway.login.await_args.args
    assert " " not in sent_phone
    assert sent_password == TEST_PASSWORD
    assert state_machine.state == AppState.AWAITING_PIN
    assert state_machine.has_credentials


@pytest.mark.asyncio
@pytest.mark.parametrize("phone", [
    "",
    "   ",
    "+0123456789",
    "0123456789",
    "+1",
    "+1234567890123456",
    "++14155550123",
    "+1-415-555-0123",
    "phone",
])
async def test_invalid_phone_never_reaches_network(state_machine, gateway, phone):
    with pytest.raises(ValidationError):
        await state_machine.submit_login(phone, TEST_PASSWORD)

    gateway.login.assert_not_awaited()
    assert state_machine.state == AppState.LOGGED_OUT
    assert not state_machine.has_credentials


@pytest.mark.asyncio
async def test_empty_password_is_rejected_locally(state_machine, gateway):
    with pytest.raises(ValidationError) as exc_info:
        await state_machine.submit_login(TEST_PHONE, "")

    assert exc_info.value.details["field"] == "password"
    gateway.login.assert_not_awaited()


@pytest.mark.asyncio
async def test_rejected_login_stays_logged_out(state_machine, gateway):
    gateway.login.side_effect = AuthError("Invalid phone or password")

    with pytest.raises(AuthError) as exc_info:
        await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)

    assert exc_info.value.message == "Invalid phone or password"
    assert state_machine.state == AppState.LOGGED_OUT
    assert not state_machine.has_credentials


@pytest.mark.asyncio
async def test_raw_gateway_failure_becomes_auth_error(state_machine, gateway):
    gateway.login.side_effect = ConnectionError("socket closed")

    with pytest.raises(AuthError):
        await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)

    assert state_machine.state == AppState.LOGGED_OUT


@pytest.mark.asyncio
async def test_login_then_pin_scenario(state_machine, gateway, session_store, identity):
    """Login succeeds, a short PIN is rejected locally, the full PIN signs in"""
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    assert state_machine.state == AppState.AWAITING_PIN

    with pytest.raises(ValidationError):
        await state_machine.submit_pin("12")
    assert state_machine.state == AppState.AWAITING_PIN
    assert state_machine.has_credentials
    gateway.verify_pin.assert_not_awaited()

    result = await state_machine.submit_pin(TEST_PIN)

    gateway.verify_pin.assert_awaited_once_with(TEST_PHONE, TEST_PIN)
    assert result == identity
    assert state_machine.state == AppState.AUTHENTICATED
    assert state_machine.identity == identity
    assert not state_machine.has_credentials
    assert await session_store.read() == identity


@pytest.mark.asyncio
@pytest.mark.parametrize("pin", ["", "12345", "1234567", "12345a", "١٢٣٤٥٦", "123 45"])
async def test_malformed_pin_is_rejected_locally(state_machine, gateway, pin):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)

    with pytest.raises(ValidationError):
        await state_machine.submit_pin(pin)

    gateway.verify_pin.assert_not_awaited()
    assert state_machine.state == AppState.AWAITING_PIN


@pytest.mark.asyncio
async def test_wrong_pin_keeps_credentials_for_retry(state_machine, gateway, identity):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    gateway.verify_pin.side_effect = [AuthError("Invalid PIN code. Please try again."), identity]

    with pytest.raises(AuthError):
        await state_machine.submit_pin("000000")
    assert state_machine.state == AppState.AWAITING_PIN
    assert state_machine.has_credentials

    await state_machine.submit_pin(TEST_PIN)
    assert state_machine.state == AppState.AUTHENTICATED
    assert gateway.verify_pin.await_count == 2


@pytest.mark.asyncio
async def test_back_clears_credentials(state_machine):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)

    assert state_machine.back() == AppState.LOGGED_OUT
    assert not state_machine.has_credentials


@pytest.mark.asyncio
async def test_logout_clears_session(state_machine, session_store):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    await state_machine.submit_pin(TEST_PIN)

    assert await state_machine.logout() == AppState.LOGGED_OUT
    assert state_machine.identity is None
    assert await session_store.read() is None


@pytest.mark.asyncio
async def test_actions_in_wrong_state_are_rejected(state_machine, gateway):
    with pytest.raises(InvalidStateError):
        await state_machine.submit_pin(TEST_PIN)
    with pytest.raises(InvalidStateError):
        state_machine.back()
    with pytest.raises(InvalidStateError):
        await state_machine.logout()

    gateway.verify_pin.assert_not_awaited()
    assert state_machine.state == AppState.LOGGED_OUT


@pytest.mark.asyncio
async def test_concurrent_login_issues_single_network_call(state_machine, gateway):
    """A second submit while the first is pending must not reach the network"""
    release = asyncio.Event()

    async def slow_login(phone, password):
        await release.wait()

    gateway.login.side_effect = slow_login

    first = asyncio.create_task(state_machine.submit_login(TEST_PHONE, TEST_PASSWORD))
    await asyncio.sleep(0)
    assert state_machine.is_busy

    with pytest.raises(TransitionInProgressError):
        await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)

    release.set()
    assert await first == AppState.AWAITING_PIN
    assert gateway.login.await_count == 1
    assert not state_machine.is_busy


@pytest.mark.asyncio
async def test_concurrent_pin_issues_single_network_call(state_machine, gateway, identity):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    release = asyncio.Event()

    async def slow_verify(phone, pin):
        await release.wait()
        return identity

    gateway.verify_pin.side_effect = slow_verify

    first = asyncio.create_task(state_machine.submit_pin(TEST_PIN))
    await asyncio.sleep(0)

    with pytest.raises(TransitionInProgressError):
        await state_machine.submit_pin(TEST_PIN)

    release.set()
    await first
    assert gateway.verify_pin.await_count == 1
    assert state_machine.state == AppState.AUTHENTICATED


@pytest.mark.asyncio
async def test_back_during_pending_pin_discards_result(state_machine, gateway, session_store, identity):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    release = asyncio.Event()

    async def slow_verify(phone, pin):
        await release.wait()
        return identity

    gateway.verify_pin.side_effect = slow_verify

    pending = asyncio.create_task(state_machine.submit_pin(TEST_PIN))
    await asyncio.sleep(0)
    state_machine.back()
    release.set()

    with pytest.raises(InvalidStateError):
        await pending

    assert state_machine.state == AppState.LOGGED_OUT
    assert state_machine.identity is None
    assert await session_store.read() is None


@pytest.mark.asyncio
async def test_logout_store_failure_is_wrapped(state_machine, session_store):
    await state_machine.submit_login(TEST_PHONE, TEST_PASSWORD)
    await state_machine.submit_pin(TEST_PIN)
    session_store.clear = AsyncMock(side_effect=ConnectionError("redis down"))

    with pytest.raises(AuthError):
        await state_machine.logout()

    assert state_machine.state == AppState.LOGGED_OUT
    assert state_machine.identity is None
