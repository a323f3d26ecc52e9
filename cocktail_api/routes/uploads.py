"""
Request body helpers for endpoints that accept both multipart forms (with
image files) and plain JSON.

Multipart conventions:
    - Repeated fields (e.g. several "ingredients") become a list.
    - A file field holding a string is an existing filename, not an upload.
    - A file field with no filename (an empty <input type=file>) is ignored.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData, UploadFile

from cocktail_api.exceptions import ValidationError
from cocktail_api.services.cocktail_service import ImageUpload

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_upload(value: Any) -> Optional[ImageUpload]:
    """Read a form file into memory; None when the field holds no upload."""
    if not isinstance(value, UploadFile) or not value.filename:
        return None
    try:
        content = await value.read()
    finally:
        await value.close()
    logger.info("Received upload: filename=%s, size=%d bytes", value.filename, len(content))
    return ImageUpload(filename=value.filename, content=content)


def _form_fields(form: FormData, list_fields: Iterable[str]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for key in form.keys():
        values = [v for v in form.getlist(key) if not isinstance(v, UploadFile)]
        if not values:
            continue
        if key in list_fields:
            if len(values) == 1 and values[0].lstrip().startswith("["):
                fields[key] = _json_list(key, values[0])
            else:
                fields[key] = values
        else:
            fields[key] = values[-1]
    return fields


def _json_list(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(message=f"Field '{key}' is not a valid JSON list.", field=key) from e


async def read_payload(
    request: Request,
    file_fields: Iterable[str] = (),
    list_fields: Iterable[str] = (),
) -> Tuple[Dict[str, Any], Dict[str, Optional[ImageUpload]]]:
    """
    Split a request body into plain fields and uploaded files.

    Returns:
        (fields, uploads); uploads maps every name in file_fields to an
        ImageUpload or None.
    """
    uploads: Dict[str, Optional[ImageUpload]] = {name: None for name in file_fields}
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields = _form_fields(form, list_fields)
        for name in uploads:
            uploads[name] = await read_upload(form.get(name))
        return fields, uploads

    body = await request.body()
    if not body.strip():
        return {}, uploads
    try:
        fields = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValidationError(message="Request body is not valid JSON.") from e
    if not isinstance(fields, dict):
        raise ValidationError(message="Request body must be a JSON object.")
    return fields, uploads


def parse_fields(model: Type[ModelT], fields: Dict[str, Any]) -> ModelT:
    """Validate plain fields into a schema, reporting failures as a 400."""
    try:
        return model.model_validate(fields)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(
            message="Request fields failed validation.",
            context={"errors": errors},
        ) from e
