"""
HTTP routes for the relief backend API.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from relief_api import auth
from relief_api.config import Settings, get_settings
from relief_api.db import (
    CommentRecord,
    CommunityPostRecord,
    DbClient,
    InvalidIdError,
    SupplyRecord,
    VolunteerRecord,
    parse_object_id,
)
from relief_api.dependencies import get_db_client, get_media_client
from relief_api.errors import BadRequestError, NotFoundError, UpstreamError
from relief_api.media import MediaClient, MediaUploadError
from relief_api.schemas import (
    CommentPayload,
    CommunityPayload,
    DataResponse,
    Envelope,
    InsertResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    SupplyPayload,
    UploadResponse,
    VolunteerPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def format_display_date(moment: Optional[datetime] = None) -> str:
    """Render a date like ``October 19, 2026``."""
    moment = moment or datetime.now()
    return f"{moment:%B} {moment.day}, {moment.year}"


def _require_valid_id(record_id: str) -> None:
    try:
        parse_object_id(record_id)
    except InvalidIdError as exc:
        raise BadRequestError("Invalid id", error=str(exc)) from exc


# Auth


@router.post("/register", response_model=Envelope, status_code=201)
def register(
    payload: RegisterRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    auth.register(
        db, settings, name=payload.name, email=payload.email, password=payload.password
    )
    return Envelope(success=True, message="User registered successfully")


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    token = auth.login(db, settings, email=payload.email, password=payload.password)
    return LoginResponse(success=True, message="Login successful", token=token)


# Supplies


@router.post(
    "/create-supply",
    response_model=InsertResponse,
    dependencies=[Depends(auth.require_user)],
)
def create_supply(payload: SupplyPayload, db: DbClient = Depends(get_db_client)):
    result = db.create_supply(SupplyRecord(**payload.model_dump()))
    return InsertResponse(
        success=True, message="Successfully supply create", result=result.as_dict()
    )


@router.get("/supplies", response_model=DataResponse)
def list_supplies(
    limit: Optional[int] = Query(None, ge=1),
    db: DbClient = Depends(get_db_client),
):
    supplies = db.list_supplies(limit=limit)
    return DataResponse(
        success=True,
        message="Successfully retrieve supplies!",
        data=[s.as_dict() for s in supplies],
    )


@router.get("/supply/{supply_id}", response_model=DataResponse)
def get_supply(supply_id: str, db: DbClient = Depends(get_db_client)):
    _require_valid_id(supply_id)
    supply = db.get_supply(supply_id)
    if not supply:
        raise NotFoundError("Supply not found")
    return DataResponse(
        success=True, message="Successfully retrieved supply", data=supply.as_dict()
    )


@router.put(
    "/supply/{supply_id}",
    response_model=Envelope,
    dependencies=[Depends(auth.require_user)],
)
def update_supply(
    supply_id: str,
    payload: SupplyPayload,
    db: DbClient = Depends(get_db_client),
):
    _require_valid_id(supply_id)
    matched = db.update_supply(supply_id, payload.model_dump(exclude_unset=True))
    if not matched:
        raise NotFoundError("Supply not found")
    return Envelope(success=True, message="Successfully updated supply")


@router.delete(
    "/supply/{supply_id}",
    response_model=DataResponse,
    dependencies=[Depends(auth.require_user)],
)
def delete_supply(supply_id: str, db: DbClient = Depends(get_db_client)):
    _require_valid_id(supply_id)
    result = db.delete_supply(supply_id)
    if result.deleted_count == 0:
        raise NotFoundError("Supply not found")
    return DataResponse(
        success=True, message="Successfully deleted supply!", data=result.as_dict()
    )


# Volunteers


@router.post(
    "/volunteer",
    response_model=InsertResponse,
    dependencies=[Depends(auth.require_user)],
)
def create_volunteer(payload: VolunteerPayload, db: DbClient = Depends(get_db_client)):
    result = db.create_volunteer(VolunteerRecord(**payload.model_dump()))
    return InsertResponse(
        success=True, message="Create volunteer Successfully", result=result.as_dict()
    )


@router.get("/volunteer", response_model=DataResponse)
def list_volunteers(
    limit: Optional[int] = Query(None, ge=1),
    db: DbClient = Depends(get_db_client),
):
    volunteers = db.list_volunteers(limit=limit)
    return DataResponse(
        success=True,
        message="Successfully retrieve volunteer!",
        data=[v.as_dict() for v in volunteers],
    )


# Community posts


@router.post(
    "/community",
    response_model=InsertResponse,
    dependencies=[Depends(auth.require_user)],
)
def create_community_post(
    payload: CommunityPayload, db: DbClient = Depends(get_db_client)
):
    post = CommunityPostRecord(**payload.model_dump(), created_at=format_display_date())
    result = db.create_community_post(post)
    return InsertResponse(
        success=True, message="Create community Successfully", result=result.as_dict()
    )


@router.get("/community", response_model=DataResponse)
def list_community_posts(
    limit: Optional[int] = Query(None, ge=1),
    db: DbClient = Depends(get_db_client),
):
    posts = db.list_community_posts(limit=limit)
    return DataResponse(
        success=True,
        message="Successfully retrieve community!",
        data=[p.as_dict() for p in posts],
    )


@router.get("/community/{post_id}", response_model=DataResponse)
def get_community_post(post_id: str, db: DbClient = Depends(get_db_client)):
    _require_valid_id(post_id)
    post = db.get_community_post(post_id)
    if not post:
        raise NotFoundError("community post are not found")
    return DataResponse(
        success=True, message="Successfully retrieved community", data=post.as_dict()
    )


# Users


@router.get(
    "/user",
    response_model=DataResponse,
    dependencies=[Depends(auth.require_user)],
)
def list_users(db: DbClient = Depends(get_db_client)):
    users = db.list_users()
    return DataResponse(
        success=True,
        message="successfully retrieve user!",
        data=[u.as_dict() for u in users],
    )


@router.get(
    "/user/{email}",
    response_model=DataResponse,
    dependencies=[Depends(auth.require_user)],
)
def get_user(email: str, db: DbClient = Depends(get_db_client)):
    user = db.get_user_by_email(email)
    if not user:
        raise NotFoundError("User not found")
    return DataResponse(
        success=True, message="successfully retrieve user!", data=user.as_dict()
    )


# Comments


@router.post(
    "/comment",
    response_model=InsertResponse,
    dependencies=[Depends(auth.require_user)],
)
def create_comment(payload: CommentPayload, db: DbClient = Depends(get_db_client)):
    comment = CommentRecord(
        name=payload.name,
        email=payload.email,
        comment=payload.comment,
        time=format_display_date(),
        post_id=payload.id,
    )
    result = db.create_comment(comment)
    return InsertResponse(
        success=True, message="Comment Posted Successfully!", result=result.as_dict()
    )


@router.get("/comment", response_model=DataResponse)
def list_comments(
    post_id: Optional[str] = Query(None, alias="id"),
    db: DbClient = Depends(get_db_client),
):
    comments = db.list_comments(post_id=post_id)
    return DataResponse(
        success=True,
        message="Successfully retrieve comments!",
        data=[c.as_dict() for c in comments],
    )


# Media


@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(auth.require_user)],
)
async def upload_image(
    image: UploadFile | None = File(None),
    media: MediaClient = Depends(get_media_client),
):
    if image is None:
        raise BadRequestError("No file uploaded")
    data = await image.read()
    try:
        url = await run_in_threadpool(media.upload, data, image.content_type)
    except MediaUploadError as exc:
        logger.error("Error uploading image: %s", exc)
        raise UpstreamError("Error uploading image", error=str(exc)) from exc
    return UploadResponse(success=True, message="Image uploaded successfully", url=url)
