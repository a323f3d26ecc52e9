"""
Cocktail Catalog Backend: Cocktail Route Handlers
===================================================

What:  Listing, lookup, create, update and delete of cocktails.
How:   Create and update accept multipart/form-data (text fields plus the
       "cocktailImage" and "cocktailHeaderImage" files) or JSON. Handlers
       only split the body and call CocktailService; every rule lives there.
Who:   The front end's cocktail list, detail and editor pages.

Routes:
    GET    /cocktail                    all cocktails
    GET    /cocktail/cocktail/{id}      one cocktail
    GET    /cocktail/{spirit}           cocktails made with a spirit
    POST   /cocktail                    create (201)
    PUT    /cocktail/cocktail/{id}      partial update
    DELETE /cocktail/{id}               delete
    DELETE /cocktail                    400, no id given
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import get_db_session
from cocktail_api.dependencies import AuthenticatedUser, get_cocktail_service, require_user
from cocktail_api.exceptions import ValidationError
from cocktail_api.routes.uploads import parse_fields, read_payload
from cocktail_api.schemas.cocktail import CocktailInput, CocktailResponse
from cocktail_api.schemas.common import ErrorResponse, MessageResponse
from cocktail_api.services.cocktail_service import CocktailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cocktail", tags=["Cocktails"])

ICON_FIELD = "cocktailImage"
HEADER_FIELD = "cocktailHeaderImage"


async def _read_cocktail_request(request: Request):
    fields, uploads = await read_payload(
        request,
        file_fields=(ICON_FIELD, HEADER_FIELD),
        list_fields=("ingredients",),
    )
    if not fields and not any(uploads.values()):
        raise ValidationError(message="Request body is empty.")
    data = parse_fields(CocktailInput, fields)
    return data, uploads[ICON_FIELD], uploads[HEADER_FIELD]


@router.get("", response_model=List[CocktailResponse], summary="List all cocktails")
async def list_cocktails(
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[CocktailResponse]:
    return [CocktailResponse.model_validate(c) for c in await cocktails.list_cocktails(db)]


@router.get(
    "/cocktail/{cocktail_id}",
    response_model=CocktailResponse,
    responses={404: {"description": "Cocktail not found", "model": ErrorResponse}},
    summary="Get one cocktail",
)
async def get_cocktail(
    cocktail_id: UUID,
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> CocktailResponse:
    return CocktailResponse.model_validate(await cocktails.get_cocktail(db, cocktail_id))


@router.get(
    "/{spirit_name}",
    response_model=List[CocktailResponse],
    responses={404: {"description": "Unknown spirit or no cocktails", "model": ErrorResponse}},
    summary="List cocktails made with a spirit",
)
async def list_by_spirit(
    spirit_name: str,
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[CocktailResponse]:
    return [CocktailResponse.model_validate(c) for c in await cocktails.list_by_spirit(db, spirit_name)]


@router.post(
    "",
    status_code=201,
    response_model=CocktailResponse,
    responses={
        400: {"description": "Empty body, missing fields or bad image", "model": ErrorResponse},
        404: {"description": "Spirit not found", "model": ErrorResponse},
        409: {"description": "Cocktail name already taken", "model": ErrorResponse},
    },
    summary="Create a cocktail (multipart with optional images)",
)
async def create_cocktail(
    request: Request,
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> CocktailResponse:
    data, icon, header = await _read_cocktail_request(request)
    cocktail = await cocktails.create_cocktail(db, data, icon=icon, header=header)
    return CocktailResponse.model_validate(cocktail)


@router.put(
    "/cocktail/{cocktail_id}",
    response_model=CocktailResponse,
    responses={
        400: {"description": "Empty body or bad image", "model": ErrorResponse},
        404: {"description": "Cocktail or spirit not found", "model": ErrorResponse},
        409: {"description": "Cocktail name already taken", "model": ErrorResponse},
    },
    summary="Update a cocktail (partial, multipart with optional images)",
)
async def update_cocktail(
    cocktail_id: UUID,
    request: Request,
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> CocktailResponse:
    data, icon, header = await _read_cocktail_request(request)
    cocktail = await cocktails.update_cocktail(db, cocktail_id, data, icon=icon, header=header)
    return CocktailResponse.model_validate(cocktail)


@router.delete(
    "",
    response_model=MessageResponse,
    responses={400: {"description": "No cocktail id given", "model": ErrorResponse}},
    summary="Rejects deletes without an id",
)
async def delete_without_id(_: AuthenticatedUser = Depends(require_user)) -> MessageResponse:
    raise ValidationError(message="Cocktail id missing.", field="id")


@router.delete(
    "/{cocktail_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Cocktail not found", "model": ErrorResponse}},
    summary="Delete a cocktail",
)
async def delete_cocktail(
    cocktail_id: UUID,
    _: AuthenticatedUser = Depends(require_user),
    cocktails: CocktailService = Depends(get_cocktail_service),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return MessageResponse(message=await cocktails.delete_cocktail(db, cocktail_id))
