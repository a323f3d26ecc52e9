"""Spirit route handlers: listing for signed-in users, creation for admins."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import get_db_session
from cocktail_api.dependencies import (
    AuthenticatedUser,
    get_spirit_service,
    require_admin,
    require_user,
)
from cocktail_api.schemas.common import ErrorResponse
from cocktail_api.schemas.spirit import SpiritCreate, SpiritResponse
from cocktail_api.services.spirit_service import SpiritService

router = APIRouter(prefix="/spirit", tags=["Spirits"])


@router.get("", response_model=List[SpiritResponse], summary="List spirits")
async def list_spirits(
    _: AuthenticatedUser = Depends(require_user),
    spirits: SpiritService = Depends(get_spirit_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[SpiritResponse]:
    return [SpiritResponse.model_validate(s) for s in await spirits.list_spirits(db)]


@router.post(
    "",
    status_code=201,
    response_model=SpiritResponse,
    responses={409: {"description": "Spirit already exists", "model": ErrorResponse}},
    summary="Add a spirit (admin)",
)
async def create_spirit(
    body: SpiritCreate,
    _: AuthenticatedUser = Depends(require_admin),
    spirits: SpiritService = Depends(get_spirit_service),
    db: AsyncSession = Depends(get_db_session),
) -> SpiritResponse:
    return SpiritResponse.model_validate(await spirits.create_spirit(db, body.spirit_name))
