from __future__ import annotations

import httpx
import pytest

from app.config import Settings
from app.services.auth_service import AuthService
from app.services.email_service import EmailOutbox
from app.services.google_auth import GoogleIdentityVerifier
from app.utils.exceptions import InvalidCredentials
from conftest import load_admin

USERINFO = {
    "sub": "1098765",
    "email": "G@Example-Mail.com",
    "name": "Grace",
    "picture": "https://lh3.googleusercontent.com/a/photo",
    "email_verified": True,
}


def _transport(userinfo=None, tokeninfo=None, status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/userinfo"):
            assert request.headers["Authorization"] == "Bearer good-token"
            return httpx.Response(status, json=userinfo if userinfo is not None else USERINFO)
        if request.url.path.endswith("/tokeninfo"):
            return httpx.Response(200, json=tokeninfo or {})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _verifier(transport, **settings) -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier(Settings(_env_file=None, **settings), transport=transport)


def test_resolve_returns_identity() -> None:
    info = _verifier(_transport()).resolve("good-token")
    assert info.sub == "1098765"
    assert info.email == "G@Example-Mail.com"
    assert info.picture.startswith("https://")
    assert info.email_verified is True


def test_resolve_rejects_unverified_email() -> None:
    with pytest.raises(InvalidCredentials):
        _verifier(_transport(userinfo={**USERINFO, "email_verified": False})).resolve("good-token")


def test_resolve_rejects_http_errors() -> None:
    with pytest.raises(InvalidCredentials):
        _verifier(_transport(status=401)).resolve("good-token")


def test_resolve_checks_audience_when_client_id_configured() -> None:
    ok = _verifier(_transport(tokeninfo={"aud": "client-123"}), GOOGLE_CLIENT_ID="client-123")
    assert ok.resolve("good-token").sub == "1098765"

    wrong = _verifier(_transport(tokeninfo={"aud": "someone-else"}), GOOGLE_CLIENT_ID="client-123")
    with pytest.raises(InvalidCredentials):
        wrong.resolve("good-token")


def test_access_token_claims_replace_relayed_ones(db, sessions, mailer, background_tasks) -> None:
    service = AuthService(
        db=db,
        sessions=sessions,
        outbox=EmailOutbox(mailer, background_tasks),
        google=_verifier(_transport()),
    )
    result = service.sign_in_with_google(
        email="attacker@b.com", name="Mallory", google_id="forged", access_token="good-token"
    )
    assert result.success is True
    assert result.admin.email == "g@example-mail.com"
    assert load_admin(db, "attacker@b.com") is None
    assert load_admin(db, "g@example-mail.com").google_id == "1098765"


def test_access_token_can_be_required(db, sessions, mailer, background_tasks) -> None:
    service = AuthService(
        db=db,
        sessions=sessions,
        outbox=EmailOutbox(mailer, background_tasks),
        google=_verifier(_transport(), GOOGLE_REQUIRE_ACCESS_TOKEN=True),
    )
    result = service.sign_in_with_google(email="g@b.com", name="G", google_id="g-1")
    assert result.success is False
    assert result.code == "INVALID_CREDENTIALS"
