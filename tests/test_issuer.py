# tests/test_issuer.py
import pytest

from checkin.core import credentials
from checkin.core.errors import CredentialGenerationExhausted, RegistrationNotFound, StorageUnavailable
from checkin.db.models import CredentialStatus
from checkin.services.issuer import CredentialIssuer

pytestmark = pytest.mark.anyio


async def test_mint_returns_valid_unique_credential(sessions, make_registration):
    issuer = CredentialIssuer(sessions)
    rid = await make_registration()

    token = await issuer.mint(rid)
    assert issuer.is_valid_format(token)
    assert await issuer.is_unique(token) is False
    assert await issuer.is_unique(credentials.new_credential()) is True

    reg = await issuer.resolve(token)
    assert reg.id == rid
    assert reg.credential == token
    assert reg.credential_status == CredentialStatus.active
    assert reg.admitted_at is None and reg.admitted_by is None


async def test_remint_invalidates_previous_credential(sessions, make_registration):
    issuer = CredentialIssuer(sessions)
    rid = await make_registration()

    first = await issuer.mint(rid)
    second = await issuer.mint(rid)
    assert first != second
    assert await issuer.resolve(first) is None
    assert (await issuer.resolve(second)).id == rid


async def test_credentials_differ_across_registrations(sessions, make_registration):
    issuer = CredentialIssuer(sessions)
    tokens = {await issuer.mint(await make_registration()) for _ in range(5)}
    assert len(tokens) == 5


async def test_mint_unknown_registration_fails_loudly(sessions):
    issuer = CredentialIssuer(sessions)
    with pytest.raises(RegistrationNotFound):
        await issuer.mint("does-not-exist")


async def test_resolve_malformed_never_touches_storage():
    class _Boom:
        def __call__(self, *a, **kw):
            raise AssertionError("storage should not be used")

    issuer = CredentialIssuer(_Boom())
    assert await issuer.resolve("not-a-real-credential") is None
    assert await issuer.resolve("") is None


async def test_resolve_well_formed_unknown(sessions):
    issuer = CredentialIssuer(sessions)
    assert await issuer.resolve(credentials.new_credential()) is None


async def test_mint_exhausts_on_repeated_collisions(sessions, make_registration, monkeypatch):
    issuer = CredentialIssuer(sessions)
    taken = await issuer.mint(await make_registration())
    rid = await make_registration()

    calls = []

    def _same():
        calls.append(1)
        return taken

    monkeypatch.setattr(credentials, "new_credential", _same)
    with pytest.raises(CredentialGenerationExhausted) as exc:
        await issuer.mint(rid)
    assert exc.value.attempts == 5
    assert len(calls) == 5


async def test_unique_constraint_backstops_the_probe(sessions, make_registration, monkeypatch):
    issuer = CredentialIssuer(sessions, max_attempts=3)
    taken = await issuer.mint(await make_registration())
    rid = await make_registration()

    async def _always_unique(credential):
        return True

    monkeypatch.setattr(credentials, "new_credential", lambda: taken)
    monkeypatch.setattr(issuer, "is_unique", _always_unique)
    with pytest.raises(CredentialGenerationExhausted):
        await issuer.mint(rid)

    # la credencial sigue perteneciendo a la primera inscripción
    assert (await issuer.resolve(taken)).id != rid


async def test_mint_retries_after_a_collision(sessions, make_registration, monkeypatch):
    issuer = CredentialIssuer(sessions)
    taken = await issuer.mint(await make_registration())
    fresh = credentials.new_credential()
    candidates = iter([taken, taken, fresh])
    monkeypatch.setattr(credentials, "new_credential", lambda: next(candidates))

    rid = await make_registration()
    assert await issuer.mint(rid) == fresh


async def test_storage_failure_is_not_reported_as_not_found(tmp_path):
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

    engine = create_async_engine(f"sqlite+aiosqlite:///{(tmp_path / 'missing' / 'x.sqlite3').as_posix()}")
    issuer = CredentialIssuer(async_sessionmaker(engine))
    try:
        with pytest.raises(StorageUnavailable):
            await issuer.resolve(credentials.new_credential())
    finally:
        await engine.dispose()
