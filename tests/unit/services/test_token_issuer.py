"""
Unit tests for NipResetTokenIssuer
"""
import hashlib
from datetime import timedelta

import pytest

from src.app.repositories.nip_reset_token_repository import TokenConflictError
from src.app.services.token_issuer import NipResetTokenIssuer, generate_token, hash_token
from src.domain.entities import CorrelationRef, RequestContext, SubjectKey

SUBJECT = SubjectKey(customer_id="CLI-001", vehicle_id="VEH-100")


def test_generate_token_is_random_and_long():
    tokens = {generate_token() for _ in range(50)}
    assert len(tokens) == 50
    assert all(len(t) >= 43 for t in tokens)


def test_hash_token_is_sha256_hex():
    assert hash_token("abc") == hashlib.sha256(b"abc").hexdigest()
    assert len(hash_token("abc")) == 64


@pytest.mark.asyncio
async def test_issue_supersedes_then_inserts(mock_uow):
    calls = []
    mock_uow.nip_reset_tokens.supersede_active.side_effect = lambda *a: calls.append("supersede") or 1

    async def create(token):
        calls.append("create")
        return token

    mock_uow.nip_reset_tokens.create.side_effect = create

    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30))
    result = await issuer.issue(SUBJECT, CorrelationRef(), RequestContext())

    assert result.is_ok()
    assert calls == ["supersede", "create"]
    mock_uow.commit.assert_called_once()

    stored = mock_uow.nip_reset_tokens.create.call_args.args[0]
    assert stored.token_hash == hash_token(result.value)
    assert result.value not in stored.model_dump().values()


@pytest.mark.asyncio
async def test_issue_retries_conflict_with_new_secret(mock_uow):
    """A concurrent issuer won the unique index: retry in a fresh unit of work"""
    hashes = []

    async def create(token):
        hashes.append(token.token_hash)
        if len(hashes) == 1:
            raise TokenConflictError("unused token exists")
        return token

    mock_uow.nip_reset_tokens.create.side_effect = create

    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30), max_attempts=3)
    result = await issuer.issue(SUBJECT, CorrelationRef(), RequestContext())

    assert result.is_ok()
    assert len(hashes) == 2
    assert hashes[0] != hashes[1]
    assert hashes[1] == hash_token(result.value)
    assert mock_uow.__aenter__.call_count == 2
    assert mock_uow.nip_reset_tokens.supersede_active.call_count == 2
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_issue_gives_up_after_max_attempts(mock_uow):
    mock_uow.nip_reset_tokens.create.side_effect = TokenConflictError("unused token exists")

    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30), max_attempts=3)
    result = await issuer.issue(SUBJECT, CorrelationRef(), RequestContext())

    assert result.is_err()
    assert result.error.code == "TOKEN_ISSUE_FAILED"
    assert mock_uow.nip_reset_tokens.create.call_count == 3
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_persistence_error_propagates(mock_uow):
    """Unexpected store failure: no token, caller must not report success"""
    mock_uow.nip_reset_tokens.create.side_effect = RuntimeError("database down")

    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30))

    with pytest.raises(RuntimeError):
        await issuer.issue(SUBJECT, CorrelationRef(), RequestContext())

    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_invalidate_marks_hash_used(mock_uow):
    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30))

    assert await issuer.invalidate("plain") is True
    assert mock_uow.nip_reset_tokens.mark_used.call_args.args[0] == hash_token("plain")
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_issue_clips_metadata_to_column_width(mock_uow):
    issuer = NipResetTokenIssuer(mock_uow, ttl=timedelta(minutes=30))
    result = await issuer.issue(
        SUBJECT,
        CorrelationRef(contact_record_id="c" * 100, vehicle_record_id=None),
        RequestContext(ip="A" * 100, user_agent="u" * 600, vehicle_label="L" * 300),
    )

    assert result.is_ok()
    stored = mock_uow.nip_reset_tokens.create.call_args.args[0]
    assert stored.request_ip == "A" * 64
    assert stored.user_agent == "u" * 512
    assert stored.vehicle_label == "L" * 255
    assert stored.contact_record_id == "c" * 64
    assert stored.vehicle_record_id is None
