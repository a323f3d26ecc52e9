"""
Cocktail Catalog Backend: Auth Gate Tests
===========================================

What:  require_user in front of a test route that counts its invocations.

What we test:
    ✅ No header / wrong scheme → 401 with WWW-Authenticate, handler not run
    ✅ Invalid or expired token → 403, handler not run
    ✅ Valid token → handler runs exactly once with the identity on request.state
"""

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from cocktail_api.dependencies import AuthenticatedUser, require_user
from cocktail_api.main import register_exception_handlers
from cocktail_api.services.tokens import TokenService

SECRET = "gate-test-secret-0123456789abcdef"


@pytest.fixture
def guarded():
    tokens = TokenService(SECRET)
    calls = []

    app = FastAPI()
    app.state.token_service = tokens
    register_exception_handlers(app)

    @app.get("/protected")
    async def protected(request: Request, user: AuthenticatedUser = Depends(require_user)):
        calls.append(user)
        assert request.state.user is user
        return {"userId": str(user.user_id)}

    return app, tokens, calls


@pytest_asyncio.fixture
async def client(guarded):
    app, _, _ = guarded
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


class TestAuthGate:

    @pytest.mark.asyncio
    async def test_missing_header_is_401(self, client, guarded):
        _, _, calls = guarded
        response = await client.get("/protected")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_401(self, client, guarded):
        _, _, calls = guarded
        response = await client.get("/protected", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401
        assert calls == []

    @pytest.mark.asyncio
    async def test_bare_token_without_scheme_is_401(self, client, guarded):
        _, tokens, calls = guarded
        token = tokens.issue({"sub": str(uuid.uuid4())})
        response = await client.get("/protected", headers={"Authorization": token})
        assert response.status_code == 401
        assert calls == []

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, client, guarded):
        _, _, calls = guarded
        response = await client.get("/protected", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorised"
        assert calls == []

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, client, guarded):
        _, tokens, calls = guarded
        token = tokens.issue({"sub": str(uuid.uuid4())}, expires_delta=timedelta(minutes=-1))
        response = await client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_uuid_subject_is_403(self, client, guarded):
        _, tokens, calls = guarded
        token = tokens.issue({"sub": "not-a-uuid"})
        response = await client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
        assert calls == []

    @pytest.mark.asyncio
    async def test_valid_token_runs_handler_once(self, client, guarded):
        _, tokens, calls = guarded
        user_id = uuid.uuid4()
        token = tokens.issue({"sub": str(user_id)})

        response = await client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"userId": str(user_id)}
        assert len(calls) == 1
        assert calls[0].user_id == user_id
        assert calls[0].claims["sub"] == str(user_id)

    @pytest.mark.asyncio
    async def test_lowercase_bearer_scheme_accepted(self, client, guarded):
        _, tokens, calls = guarded
        token = tokens.issue({"sub": str(uuid.uuid4())})
        response = await client.get("/protected", headers={"Authorization": f"bearer {token}"})
        assert response.status_code == 200
        assert len(calls) == 1
