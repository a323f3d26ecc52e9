"""
Cocktail Catalog Backend: User Service Tests
==============================================

What we test:
    ✅ Registration hashes the password and normalizes the email
    ✅ Duplicate email → ConflictError
    ✅ Sign-in returns a token whose subject is the user id
    ✅ Unknown email and wrong password fail with the same message
    ✅ Partial update re-hashes a new password; avatar upload wins over a string
    ✅ Account changes: owner or admin only; access level changes admin only
"""

from uuid import UUID, uuid4

import pytest

from cocktail_api.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from cocktail_api.schemas.user import UserCreate, UserUpdate
from cocktail_api.services.user_service import UserService


@pytest.fixture
def service(codec, token_service):
    return UserService(codec, token_service)


def registration(**overrides) -> UserCreate:
    fields = {
        "first_name": "Nick",
        "last_name": "Strangeway",
        "email": "Nick@Example.com",
        "password": "negroni-1919",
    }
    fields.update(overrides)
    return UserCreate(**fields)


class TestRegistration:

    @pytest.mark.asyncio
    async def test_create_hashes_password(self, db_session, service, codec):
        user = await service.create_user(db_session, registration())

        assert user.email == "nick@example.com"
        assert user.password != "negroni-1919"
        assert codec.verify("negroni-1919", user.password)
        assert user.new_user is True
        assert user.access_level == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, db_session, service):
        await service.create_user(db_session, registration())

        with pytest.raises(ConflictError) as exc_info:
            await service.create_user(db_session, registration(email="NICK@example.com"))
        assert exc_info.value.field == "email"


class TestSignIn:

    @pytest.mark.asyncio
    async def test_sign_in_issues_token(self, db_session, service, token_service):
        created = await service.create_user(db_session, registration())

        user, token = await service.sign_in(db_session, "nick@example.com", "negroni-1919")

        assert user.id == created.id
        assert UUID(token_service.verify(token)["sub"]) == created.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_alike(self, db_session, service):
        await service.create_user(db_session, registration())

        with pytest.raises(ValidationError) as wrong_password:
            await service.sign_in(db_session, "nick@example.com", "martini")
        with pytest.raises(ValidationError) as unknown_email:
            await service.sign_in(db_session, "nobody@example.com", "negroni-1919")

        assert wrong_password.value.message == unknown_email.value.message == "Username or password invalid."


class TestProfile:

    @pytest.mark.asyncio
    async def test_update_rehashes_password(self, db_session, service, codec):
        user = await service.create_user(db_session, registration())

        updated = await service.update_user(db_session, user.id, UserUpdate(password="boulevardier"))

        assert codec.verify("boulevardier", updated.password)
        assert not codec.verify("negroni-1919", updated.password)

    @pytest.mark.asyncio
    async def test_update_is_partial(self, db_session, service):
        user = await service.create_user(db_session, registration(bio="Bartender"))

        updated = await service.update_user(db_session, user.id, UserUpdate(new_user=False))

        assert updated.new_user is False
        assert updated.bio == "Bartender"
        assert updated.first_name == "Nick"

    @pytest.mark.asyncio
    async def test_processed_avatar_wins(self, db_session, service):
        user = await service.create_user(db_session, registration())

        updated = await service.update_user(
            db_session, user.id, UserUpdate(avatar="old.png"), avatar_name="fresh.png"
        )

        assert updated.avatar == "fresh.png"

    @pytest.mark.asyncio
    async def test_email_change_to_taken_email_conflicts(self, db_session, service):
        await service.create_user(db_session, registration(email="taken@example.com"))
        user = await service.create_user(db_session, registration())

        with pytest.raises(ConflictError):
            await service.update_user(db_session, user.id, UserUpdate(email="taken@example.com"))

    @pytest.mark.asyncio
    async def test_delete_then_get(self, db_session, service):
        user = await service.create_user(db_session, registration())

        assert await service.delete_user(db_session, user.id) == f"User: {user.id} deleted."
        with pytest.raises(NotFoundError):
            await service.get_user(db_session, user.id)

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session, service):
        with pytest.raises(NotFoundError):
            await service.get_user(db_session, uuid4())
        assert await service.find_user(db_session, uuid4()) is None


class TestAccountAuthorization:

    @pytest.mark.asyncio
    async def test_owner_may_edit_own_profile(self, db_session, service, user):
        await service.authorize_account_change(db_session, user.id, user.id, UserUpdate(bio="Hi"))

    @pytest.mark.asyncio
    async def test_other_user_is_refused(self, db_session, service, user, admin_user):
        with pytest.raises(AuthError) as exc_info:
            await service.authorize_account_change(db_session, user.id, admin_user.id)
        assert exc_info.value.status_code == 403
        assert exc_info.value.context["reason"] == "not_account_owner"

    @pytest.mark.asyncio
    async def test_owner_cannot_change_access_level(self, db_session, service, user):
        with pytest.raises(AuthError) as exc_info:
            await service.authorize_account_change(db_session, user.id, user.id, UserUpdate(access_level=2))
        assert exc_info.value.context["reason"] == "insufficient_access_level"

    @pytest.mark.asyncio
    async def test_admin_may_change_anyone(self, db_session, service, user, admin_user):
        await service.authorize_account_change(db_session, admin_user.id, user.id, UserUpdate(access_level=2))
        await service.authorize_account_change(db_session, admin_user.id, user.id)

    @pytest.mark.asyncio
    async def test_admin_level_is_configurable(self, db_session, codec, token_service, admin_user):
        strict = UserService(codec, token_service, admin_level=3)
        assert strict.is_admin(admin_user) is False
        assert strict.is_admin(None) is False
