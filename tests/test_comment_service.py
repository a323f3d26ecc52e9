"""
Cocktail Catalog Backend: Comment Service Tests
=================================================

What we test:
    ✅ Comments are stored trimmed and listed per cocktail, newest first
    ✅ Empty / whitespace-only / over-long text → ValidationError
    ✅ Missing references → ValidationError naming the field
    ✅ Unknown cocktail or unknown author → NotFoundError
    ✅ The length limit comes from the constructor
    ✅ Delete returns the removed comment; unknown id → NotFoundError
"""

from uuid import uuid4

import pytest
import pytest_asyncio

from cocktail_api.exceptions import NotFoundError, ValidationError
from cocktail_api.models import Cocktail
from cocktail_api.schemas.comment import CommentCreate
from cocktail_api.services.comment_service import CommentService


@pytest.fixture
def service():
    return CommentService()


@pytest_asyncio.fixture
async def cocktail(db_session, vodka, user):
    drink = Cocktail(
        cocktail_name="Moscow Mule",
        spirit_name=vodka.spirit_name,
        spirit_id=vodka.id,
        preparation="Build over ice.",
        ingredients=["Vodka", "Ginger beer", "Lime"],
    )
    db_session.add(drink)
    await db_session.flush()
    return drink


def comment_on(cocktail, user, text="Lovely and sharp."):
    return CommentCreate(
        text=text,
        cocktail_id=cocktail.id,
        user_id=user.id,
        user_name=user.display_name,
    )


class TestAddComment:

    @pytest.mark.asyncio
    async def test_add_and_list(self, db_session, service, cocktail, user):
        created = await service.add_comment(db_session, comment_on(cocktail, user, "  Lovely and sharp.  "))

        assert created.text == "Lovely and sharp."
        listed = await service.list_for_cocktail(db_session, cocktail.id)
        assert [c.id for c in listed] == [created.id]
        assert await service.list_for_cocktail(db_session, uuid4()) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [None, "", "   \n\t"])
    async def test_empty_text_rejected(self, db_session, service, cocktail, user, text):
        with pytest.raises(ValidationError, match="Please enter a comment"):
            await service.add_comment(db_session, comment_on(cocktail, user, text))

    @pytest.mark.asyncio
    async def test_text_at_limit_accepted(self, db_session, service, cocktail, user):
        text = "x" * service.max_length
        created = await service.add_comment(db_session, comment_on(cocktail, user, text))
        assert len(created.text) == service.max_length

    @pytest.mark.asyncio
    async def test_text_over_limit_rejected(self, db_session, service, cocktail, user):
        text = "x" * (service.max_length + 1)
        with pytest.raises(ValidationError) as exc_info:
            await service.add_comment(db_session, comment_on(cocktail, user, text))
        assert exc_info.value.field == "text"

    @pytest.mark.asyncio
    async def test_configured_limit(self, db_session, cocktail, user):
        strict = CommentService(max_length=10)
        with pytest.raises(ValidationError) as exc_info:
            await strict.add_comment(db_session, comment_on(cocktail, user, "x" * 11))
        assert exc_info.value.context["max_length"] == 10

    @pytest.mark.asyncio
    async def test_missing_user_name_rejected(self, db_session, service, cocktail, user):
        data = comment_on(cocktail, user).model_copy(update={"user_name": None})
        with pytest.raises(ValidationError) as exc_info:
            await service.add_comment(db_session, data)
        assert exc_info.value.field == "userName"

    @pytest.mark.asyncio
    async def test_unknown_cocktail(self, db_session, service, user):
        data = CommentCreate(text="Hi", cocktail_id=uuid4(), user_id=user.id, user_name="Ada")
        with pytest.raises(NotFoundError):
            await service.add_comment(db_session, data)

    @pytest.mark.asyncio
    async def test_unknown_author(self, db_session, service, cocktail):
        data = CommentCreate(text="Hi", cocktail_id=cocktail.id, user_id=uuid4(), user_name="Ghost")
        with pytest.raises(NotFoundError) as exc_info:
            await service.add_comment(db_session, data)
        assert exc_info.value.context["resource"] == "user"
        assert await service.list_comments(db_session) == []


class TestDeleteComment:

    @pytest.mark.asyncio
    async def test_delete(self, db_session, service, cocktail, user):
        created = await service.add_comment(db_session, comment_on(cocktail, user))

        deleted = await service.delete_comment(db_session, created.id)

        assert deleted.id == created.id
        assert await service.list_comments(db_session) == []

    @pytest.mark.asyncio
    async def test_delete_missing(self, db_session, service):
        with pytest.raises(NotFoundError):
            await service.delete_comment(db_session, uuid4())
