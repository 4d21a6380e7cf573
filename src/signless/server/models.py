"""Pydantic request/response models for the signless relay server."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from signless.claims.typed_data import MAX_UINT256


class RegisterRequest(BaseModel):
    """Request body for POST /delegates."""

    owner: str
    delegate: str
    expiry: int
    signature: str


class ExecuteRequest(BaseModel):
    """Request body for POST /execute."""

    delegate: str
    account: str
    to: str
    value: int = Field(default=0, ge=0, le=MAX_UINT256)
    data: str = "0x"
    signature: str


class DelegateResponse(BaseModel):
    """Response body representing a single delegate record."""

    owner: str
    delegate: str
    expiry: int
    active: bool


class DelegateListResponse(BaseModel):
    """Response body for GET /delegates/{owner}."""

    owner: str
    offset: int
    limit: int
    total: int
    delegates: list[str] = Field(default_factory=list)


class ExecuteResponse(BaseModel):
    """Response body for POST /execute."""

    delegate: str
    account: str
    success: bool
    return_data: str = "0x"


class NonceResponse(BaseModel):
    """Response body for GET /nonce/{address}."""

    address: str
    nonce: int


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str = "ok"
    service: str = "signless"
    version: str = "0.1.0"
    chain_id: Optional[int] = None
    module_address: Optional[str] = None
    delegate_count: int = 0


class ErrorResponse(BaseModel):
    """Standard error response body. ``reason`` is the stable failure code."""

    error: str
    reason: str = ""
    detail: str = ""


__all__ = [
    "DelegateListResponse",
    "DelegateResponse",
    "ErrorResponse",
    "ExecuteRequest",
    "ExecuteResponse",
    "HealthResponse",
    "NonceResponse",
    "RegisterRequest",
]
