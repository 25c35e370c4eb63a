"""
Inkpress Backend - Auth Service Unit Tests
===========================================

What:  Registration and login logic with the user store mocked out.

What we test:
    ✅ Register stores a bcrypt hash, never the plaintext
    ✅ Register response carries no password material
    ✅ Duplicate username propagates DuplicateError
    ✅ Login: unknown user, wrong password, success with a verifiable token
"""

from unittest.mock import AsyncMock, patch

import pytest

from inkpress.exceptions import DuplicateError, InvalidCredentialsError
from inkpress.schemas.user import LoginRequest, RegisterRequest
from inkpress.services.auth_service import AuthService
from inkpress.services.password_hasher import password_hasher
from inkpress.services.token_service import token_service


class TestRegister:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_register_hashes_password(self, mock_db_session, make_user):
        with patch("inkpress.services.auth_service.user_store") as mock_store:
            mock_store.create_user = AsyncMock(side_effect=lambda db, name, pw_hash: make_user(name, pw_hash))

            result = await self.service.register(
                mock_db_session, RegisterRequest(username="alice", password="pw1")
            )

            _, username, stored_hash = mock_store.create_user.await_args.args
            assert username == "alice"
            assert stored_hash != "pw1"
            assert password_hasher.verify("pw1", stored_hash)

        assert result.message == "User created successfully!"
        assert result.user.username == "alice"
        dumped = result.model_dump(by_alias=True)
        assert "password" not in str(dumped)
        assert "createdAt" in dumped["user"]

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, mock_db_session):
        with patch("inkpress.services.auth_service.user_store") as mock_store:
            mock_store.create_user = AsyncMock(
                side_effect=DuplicateError(field="username", value="alice")
            )

            with pytest.raises(DuplicateError) as exc_info:
                await self.service.register(
                    mock_db_session, RegisterRequest(username="alice", password="pw1")
                )

        assert exc_info.value.field == "username"


class TestLogin:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, mock_db_session):
        with patch("inkpress.services.auth_service.user_store") as mock_store:
            mock_store.find_by_username = AsyncMock(return_value=None)

            with pytest.raises(InvalidCredentialsError) as exc_info:
                await self.service.login(
                    mock_db_session, LoginRequest(username="ghost", password="pw")
                )

        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session, make_user):
        user = make_user("alice", password_hasher.hash("pw1"))
        with patch("inkpress.services.auth_service.user_store") as mock_store:
            mock_store.find_by_username = AsyncMock(return_value=user)

            with pytest.raises(InvalidCredentialsError) as exc_info:
                await self.service.login(
                    mock_db_session, LoginRequest(username="alice", password="wrong")
                )

        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_success_issues_token(self, mock_db_session, make_user):
        user = make_user("alice", password_hasher.hash("pw1"))
        with patch("inkpress.services.auth_service.user_store") as mock_store:
            mock_store.find_by_username = AsyncMock(return_value=user)

            result, token = await self.service.login(
                mock_db_session, LoginRequest(username="alice", password="pw1")
            )

        assert result.id == user.id
        assert result.username == "alice"

        claims = token_service.verify(token)
        assert claims.id == user.id
        assert claims.username == "alice"
