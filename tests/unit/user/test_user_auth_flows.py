"""
Unit Tests for UserService

Registration, login, refresh-token rotation, revocation and profile updates.
"""

import asyncio
from datetime import timedelta

import pytest

from microservices.user_service.models import (
    AccountStatus,
    LoginRequest,
    RegisterRequest,
    Role,
    UpdateProfileRequest,
)
from microservices.user_service.protocols import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    UserNotFoundError,
    WeakPasswordError,
)

PASSWORD = "Secret123"


def login(email="ada@example.com", password=PASSWORD):
    return LoginRequest(email=email, password=password)


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_logs_in(self, user_service, user_repository, event_bus, clock):
        response = await user_service.register(registration_request())

        assert response.token_type == "Bearer"
        assert response.user.email == "ada@example.com"
        assert response.user.roles == [Role.CUSTOMER]
        assert response.user.account_status == AccountStatus.ACTIVE
        assert response.expires_at == clock.now + timedelta(hours=1)
        assert len(user_repository.sessions) == 1
        event_bus.assert_event_published("user.registered", {"email": "ada@example.com"})

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, user_service, user_repository):
        response = await user_service.register(registration_request())

        stored = user_repository.users[response.user.user_id]
        assert stored.password_hash != PASSWORD
        assert "password_hash" not in response.user.model_dump()

    @pytest.mark.asyncio
    async def test_duplicate_email_any_case(self, user_service):
        await user_service.register(registration_request())

        with pytest.raises(EmailAlreadyExistsError, match="User with email ada@example.com already exists"):
            await user_service.register(registration_request(email="ADA@example.COM"))

    @pytest.mark.asyncio
    async def test_weak_password(self, user_service, user_repository):
        with pytest.raises(WeakPasswordError, match="uppercase, lowercase, and a number"):
            await user_service.register(registration_request(password="alllowercase1"))

        assert user_repository.users == {}

    def test_invalid_email_is_rejected_by_the_model(self):
        with pytest.raises(ValueError):
            registration_request(email="not-an-email")


class TestLogin:

    @pytest.mark.asyncio
    async def test_login(self, user_service, event_bus):
        registered = await user_service.register(registration_request())

        response = await user_service.login(login(email=" ADA@example.com "))

        assert response.user.user_id == registered.user.user_id
        assert user_service.validate_token(response.access_token) is True
        assert event_bus.get_published_by_subject("user.logged_in")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("ada@example.com", "Wrong1234"),
        ("nobody@example.com", PASSWORD),
    ])
    async def test_bad_credentials_look_the_same(self, user_service, email, password):
        await user_service.register(registration_request())

        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            await user_service.login(login(email, password))

    @pytest.mark.asyncio
    async def test_inactive_account(self, user_service):
        registered = await user_service.register(registration_request())
        await user_service.deactivate_account(registered.user.user_id)

        with pytest.raises(InvalidCredentialsError, match="Account is not active"):
            await user_service.login(login())

    @pytest.mark.asyncio
    async def test_same_device_replaces_session(self, user_service, user_repository):
        await user_service.register(registration_request(), device_info="Firefox|10.0.0.1")
        await user_service.login(login(), device_info="Firefox|10.0.0.1")
        await user_service.login(login(), device_info="Safari|10.0.0.2")

        assert sorted(s.device_info for s in user_repository.sessions.values()) == [
            "Firefox|10.0.0.1",
            "Safari|10.0.0.2",
        ]


class TestRefresh:

    @pytest.mark.asyncio
    async def test_rotation(self, user_service):
        first = await user_service.register(registration_request())

        second = await user_service.refresh(first.refresh_token)

        assert second.refresh_token != first.refresh_token
        assert second.user.user_id == first.user.user_id

        third = await user_service.refresh(second.refresh_token)
        assert third.refresh_token != second.refresh_token

    @pytest.mark.asyncio
    async def test_rotated_token_cannot_be_reused(self, user_service):
        first = await user_service.register(registration_request())
        await user_service.refresh(first.refresh_token)

        with pytest.raises(InvalidTokenError, match="Refresh token not found"):
            await user_service.refresh(first.refresh_token)

    @pytest.mark.asyncio
    async def test_concurrent_refresh_admits_one(self, user_service, user_repository):
        first = await user_service.register(registration_request())

        results = await asyncio.gather(
            user_service.refresh(first.refresh_token),
            user_service.refresh(first.refresh_token),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, InvalidTokenError)) == 1
        assert len(user_repository.sessions) == 1

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_refresh_token(self, user_service):
        first = await user_service.register(registration_request())

        with pytest.raises(InvalidTokenError, match="Invalid refresh token"):
            await user_service.refresh(first.access_token)

    @pytest.mark.asyncio
    async def test_expired_session_is_removed(self, user_service, user_repository, clock):
        first = await user_service.register(registration_request())
        clock.advance(days=8)

        with pytest.raises(InvalidTokenError, match="Refresh token expired"):
            await user_service.refresh(first.refresh_token)

        assert user_repository.sessions == {}

    @pytest.mark.asyncio
    async def test_session_of_missing_user(self, user_service, user_repository):
        first = await user_service.register(registration_request())
        user_repository.users.clear()

        with pytest.raises(InvalidTokenError, match="Refresh token not found"):
            await user_service.refresh(first.refresh_token)

        assert user_repository.sessions == {}


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout(self, user_service, user_repository, event_bus):
        first = await user_service.register(registration_request())

        assert await user_service.logout(first.refresh_token) is True
        assert await user_service.logout(first.refresh_token) is False
        assert user_repository.sessions == {}
        assert len(event_bus.get_published_by_subject("user.logged_out")) == 1

        with pytest.raises(InvalidTokenError):
            await user_service.refresh(first.refresh_token)

    @pytest.mark.asyncio
    async def test_logout_all_devices(self, user_service):
        first = await user_service.register(registration_request(), device_info="a")
        await user_service.login(login(), device_info="b")
        await user_service.login(login(), device_info="c")

        assert await user_service.logout_all_devices(first.user.user_id) == 3
        assert await user_service.logout_all_devices(first.user.user_id) == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired_sessions(self, user_service, clock):
        await user_service.register(registration_request(), device_info="a")
        clock.advance(days=6)
        await user_service.login(login(), device_info="b")
        clock.advance(days=2)

        assert await user_service.cleanup_expired_sessions() == 1


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_by_id_and_email(self, user_service):
        registered = await user_service.register(registration_request())

        assert (await user_service.get_user(registered.user.user_id)).first_name == "Ada"
        assert (await user_service.get_user_by_email(" ADA@example.com")).user_id == registered.user.user_id

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service):
        with pytest.raises(UserNotFoundError, match="User not found with ID: nope"):
            await user_service.get_user("nope")
        with pytest.raises(UserNotFoundError, match="User not found with email: x@example.com"):
            await user_service.get_user_by_email("x@example.com")

    @pytest.mark.asyncio
    async def test_partial_update(self, user_service, clock):
        registered = await user_service.register(registration_request())
        clock.advance(minutes=5)

        updated = await user_service.update_profile(
            registered.user.user_id, UpdateProfileRequest(preferred_language="fr")
        )

        assert updated.preferred_language == "fr"
        assert updated.first_name == "Ada"
        assert updated.updated_at == clock.now


class TestChangePassword:

    @pytest.mark.asyncio
    async def test_change_password_revokes_sessions(self, user_service, user_repository, event_bus):
        registered = await user_service.register(registration_request())

        await user_service.change_password(registered.user.user_id, PASSWORD, "Better456")

        assert user_repository.sessions == {}
        event_bus.assert_event_published("user.password_changed", {"user_id": registered.user.user_id})
        with pytest.raises(InvalidCredentialsError):
            await user_service.login(login())
        assert (await user_service.login(login(password="Better456"))).user.user_id == registered.user.user_id

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, user_service):
        registered = await user_service.register(registration_request())

        with pytest.raises(InvalidCredentialsError, match="Current password is incorrect"):
            await user_service.change_password(registered.user.user_id, "Nope12345", "Better456")

    @pytest.mark.asyncio
    async def test_weak_new_password(self, user_service):
        registered = await user_service.register(registration_request())

        with pytest.raises(WeakPasswordError):
            await user_service.change_password(registered.user.user_id, PASSWORD, "short")


class TestDeactivate:

    @pytest.mark.asyncio
    async def test_deactivate(self, user_service, user_repository, event_bus):
        registered = await user_service.register(registration_request())

        await user_service.deactivate_account(registered.user.user_id)

        assert user_repository.users[registered.user.user_id].account_status == AccountStatus.INACTIVE
        assert user_repository.sessions == {}
        event_bus.assert_event_published("user.deactivated", {"user_id": registered.user.user_id})


def registration_request(**overrides):
    fields = dict(email="Ada@Example.com", password=PASSWORD, first_name="Ada", last_name="Lovelace")
    fields.update(overrides)
    return RegisterRequest(**fields)
