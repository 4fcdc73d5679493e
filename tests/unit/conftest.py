import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with the reset token repository"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.nip_reset_tokens = MagicMock()
    uow.nip_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.nip_reset_tokens.supersede_active = AsyncMock(return_value=0)
    uow.nip_reset_tokens.count_issued_since = AsyncMock(return_value=0)
    uow.nip_reset_tokens.lock_active_by_hash = AsyncMock(return_value=None)
    uow.nip_reset_tokens.read_by_hash = AsyncMock(return_value=None)
    uow.nip_reset_tokens.mark_used = AsyncMock(return_value=True)

    return uow


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.deliver = AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def mock_directory():
    directory = MagicMock()
    directory.resolve = AsyncMock()
    return directory


@pytest.fixture
def mock_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=True)
    return sender
