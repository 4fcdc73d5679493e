"""
Unit tests for SendResetLinkUseCase

Tests all business logic with mocked dependencies.
"""
import hashlib
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from src.app.use_cases.nip_reset.dtos import SendResetLinkCommand
from src.app.use_cases.nip_reset.send_reset_link_use_case import SendResetLinkUseCase
from src.domain.entities import (
    DirectoryCustomer,
    DirectoryNotFound,
    DirectoryVehicle,
    MultipleTargets,
    SingleTarget,
)
from src.app.services.identity_directory import DirectoryUnavailableError

CUSTOMER = DirectoryCustomer(
    customer_id="CLI-001", contact_record_id="recCONTACT001", email="ana@example.com"
)
VEHICLE = DirectoryVehicle(vehicle_id="VEH-100", record_id="recVEH100", label="Tsuru blanco")


def make_command(**overrides) -> SendResetLinkCommand:
    values = dict(
        email=" Ana@Example.com ",
        phone="+52 55 1234 5678",
        customer_id="CLI-001",
        vehicle_id="VEH-100",
        request_ip="10.0.0.1",
        user_agent="pytest",
    )
    values.update(overrides)
    return SendResetLinkCommand(**values)


def make_use_case(mock_uow, mock_directory, mock_sender) -> SendResetLinkUseCase:
    return SendResetLinkUseCase(
        mock_uow,
        mock_directory,
        mock_sender,
        reset_url_base="https://app.example.com/reset-nip",
        token_ttl=timedelta(minutes=30),
        rate_limit_window=timedelta(minutes=60),
        rate_limit_max=2,
    )


@pytest.mark.asyncio
async def test_successful_send_link(mock_uow, mock_directory, mock_sender):
    """Pairing confirmed, under limit: token persisted and link emailed"""
    # Arrange
    mock_directory.resolve.return_value = SingleTarget(customer=CUSTOMER, vehicle=VEHICLE)

    created_token = None

    async def capture_token(token):
        nonlocal created_token
        created_token = token
        return token

    mock_uow.nip_reset_tokens.create.side_effect = capture_token

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)

    # Act
    result = await use_case.execute(make_command())

    # Assert
    assert result.is_ok()
    assert result.value.message == "Hemos enviado al correo registrado la URL para reiniciar tu NIP."

    # Directory queried with normalized credentials
    mock_directory.resolve.assert_called_once_with("ana@example.com", "5512345678")

    # Email went to the registered address with a link carrying the token
    mock_sender.send.assert_called_once()
    to_email, reset_url, label = mock_sender.send.call_args.args
    assert to_email == "ana@example.com"
    assert label == "Tsuru blanco"
    parsed = urlparse(reset_url)
    assert parsed.path == "/reset-nip"
    plain_token = parse_qs(parsed.query)["token"][0]

    # Only the digest is stored, with context and correlation refs
    assert created_token is not None
    assert created_token.token_hash == hashlib.sha256(plain_token.encode()).hexdigest()
    assert created_token.token_hash != plain_token
    assert created_token.customer_id == "CLI-001"
    assert created_token.vehicle_id == "VEH-100"
    assert created_token.request_ip == "10.0.0.1"
    assert created_token.user_agent == "pytest"
    assert created_token.vehicle_label == "Tsuru blanco"
    assert created_token.contact_record_id == "recCONTACT001"
    assert created_token.vehicle_record_id == "recVEH100"
    assert created_token.used_at is None
    ttl = created_token.expires_at - created_token.created_at
    assert ttl == timedelta(minutes=30)

    mock_uow.nip_reset_tokens.supersede_active.assert_called_once()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_vehicle_picked_from_multiple_targets(mock_uow, mock_directory, mock_sender):
    other = DirectoryVehicle(vehicle_id="VEH-101", record_id="recVEH101", label="Moto")
    mock_directory.resolve.return_value = MultipleTargets(customer=CUSTOMER, vehicles=[VEHICLE, other])

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command(vehicle_id="VEH-101"))

    assert result.is_ok()
    assert mock_sender.send.call_args.args[2] == "Moto"


@pytest.mark.asyncio
async def test_directory_miss_is_not_found(mock_uow, mock_directory, mock_sender):
    mock_directory.resolve.return_value = DirectoryNotFound()

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command())

    assert result.is_err()
    assert result.error.code == "NOT_FOUND"
    assert result.error.message == "Datos incorrectos"
    mock_uow.nip_reset_tokens.create.assert_not_called()
    mock_sender.send.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides", [{"customer_id": "CLI-999"}, {"vehicle_id": "VEH-999"}]
)
async def test_pairing_mismatch_is_not_found(mock_uow, mock_directory, mock_sender, overrides):
    mock_directory.resolve.return_value = SingleTarget(customer=CUSTOMER, vehicle=VEHICLE)

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command(**overrides))

    assert result.is_err()
    assert result.error.code == "NOT_FOUND"
    mock_uow.nip_reset_tokens.create.assert_not_called()


@pytest.mark.asyncio
async def test_rate_limited(mock_uow, mock_directory, mock_sender):
    """Two links in the window already: no token, no email"""
    mock_directory.resolve.return_value = SingleTarget(customer=CUSTOMER, vehicle=VEHICLE)
    mock_uow.nip_reset_tokens.count_issued_since.return_value = 2

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command())

    assert result.is_err()
    assert result.error.code == "RATE_LIMITED"
    mock_uow.nip_reset_tokens.supersede_active.assert_not_called()
    mock_uow.nip_reset_tokens.create.assert_not_called()
    mock_sender.send.assert_not_called()


@pytest.mark.asyncio
async def test_email_failure_retires_token(mock_uow, mock_directory, mock_sender):
    mock_directory.resolve.return_value = SingleTarget(customer=CUSTOMER, vehicle=VEHICLE)
    mock_sender.send.return_value = False

    created_token = None

    async def capture_token(token):
        nonlocal created_token
        created_token = token
        return token

    mock_uow.nip_reset_tokens.create.side_effect = capture_token

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command())

    assert result.is_err()
    assert result.error.code == "LINK_DELIVERY_FAILED"
    mock_uow.nip_reset_tokens.mark_used.assert_called_once()
    assert mock_uow.nip_reset_tokens.mark_used.call_args.args[0] == created_token.token_hash


@pytest.mark.asyncio
async def test_directory_unavailable(mock_uow, mock_directory, mock_sender):
    mock_directory.resolve.side_effect = DirectoryUnavailableError("ConnectTimeout")

    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command())

    assert result.is_err()
    assert result.error.code == "DEPENDENCY_UNAVAILABLE"
    mock_uow.nip_reset_tokens.create.assert_not_called()


@pytest.mark.asyncio
async def test_missing_phone_is_invalid_request(mock_uow, mock_directory, mock_sender):
    use_case = make_use_case(mock_uow, mock_directory, mock_sender)
    result = await use_case.execute(make_command(phone="sin numero"))

    assert result.is_err()
    assert result.error.code == "INVALID_REQUEST"
    mock_directory.resolve.assert_not_called()
