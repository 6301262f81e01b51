"""
Pydantic schemas for the relief FastAPI backend.

Request bodies accept any subset of their fields; nothing is required.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SupplyPayload(BaseModel):
    image: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    # The frontend sends amounts both as numbers and as strings.
    amount: Optional[Union[int, float, str]] = None
    description: Optional[str] = None


class VolunteerPayload(BaseModel):
    image: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[Union[int, str]] = None
    location: Optional[str] = None
    passion: Optional[str] = None


class CommunityPayload(BaseModel):
    image: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class CommentPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    comment: Optional[str] = None
    id: Optional[str] = None


class Envelope(BaseModel):
    success: bool
    message: str


class LoginResponse(Envelope):
    token: str


class InsertResponse(Envelope):
    result: dict


class DataResponse(Envelope):
    data: Any = None


class UploadResponse(Envelope):
    url: str


class StatusResponse(BaseModel):
    message: str
    timestamp: str
