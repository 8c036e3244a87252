"""Listing payload parsing for endpoints that take JSON or multipart bodies.

Multipart submissions carry image files under ``images`` and send list
fields (``amenities``, ``images``, ``keepImages``) either as repeated fields
or as a JSON-encoded array.
"""

import json
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError
from starlette.datastructures import FormData, UploadFile

from havenstay.errors import InvalidInput

ModelT = TypeVar("ModelT", bound=BaseModel)

LIST_FIELDS = ("amenities", "images", "keepImages")


@dataclass
class ListingPayload(Generic[ModelT]):
    body: ModelT
    files: list[UploadFile] = field(default_factory=list)
    keep_images: list[str] | None = None


def _decode_list(values: list[str], name: str) -> list[str]:
    if len(values) == 1 and values[0].lstrip().startswith("["):
        try:
            decoded = json.loads(values[0])
        except json.JSONDecodeError:
            raise InvalidInput.for_field(name, "Must be a JSON array of strings") from None
        if not isinstance(decoded, list):
            raise InvalidInput.for_field(name, "Must be a JSON array of strings")
        return decoded
    return values


def _form_to_dict(form: FormData) -> tuple[dict, list[UploadFile]]:
    data: dict = {}
    files = [item for item in form.getlist("images") if isinstance(item, UploadFile)]
    for key in form.keys():
        values = [v for v in form.getlist(key) if isinstance(v, str)]
        if not values:
            continue
        if key in LIST_FIELDS:
            data[key] = _decode_list(values, key)
        else:
            data[key] = values[-1]
    return data, files


async def parse_listing_payload(request: Request, model: type[ModelT]) -> ListingPayload[ModelT]:
    """Validate a listing body against ``model``.

    Raises:
        InvalidInput: Malformed body or schema violation (with field detail).
    """
    content_type = request.headers.get("content-type", "")
    files: list[UploadFile] = []
    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        data, files = _form_to_dict(await request.form())
    else:
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise InvalidInput("Request body must be valid JSON") from None
        if not isinstance(data, dict):
            raise InvalidInput("Request body must be a JSON object")

    keep_images = data.pop("keepImages", data.pop("keep_images", None))
    if keep_images is not None and not isinstance(keep_images, list):
        raise InvalidInput.for_field("keepImages", "Must be a list of image paths")

    try:
        body = model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInput.from_validation_error(exc) from None

    return ListingPayload(body=body, files=files, keep_images=keep_images)
