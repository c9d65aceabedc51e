"""Shipping method settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...errors import ShippingError
from ...schemas.rates import ApiKeyVerifyRequest, ApiKeyVerifyResponse
from ...services.shipping.service import validate_api_key

router = APIRouter(prefix="/settings", tags=["settings"])


@router.post("/api-key/verify", response_model=ApiKeyVerifyResponse, status_code=status.HTTP_200_OK)
def verify_api_key(payload: ApiKeyVerifyRequest) -> ApiKeyVerifyResponse:
    try:
        validate_api_key(payload.api_key)
    except ShippingError as exc:
        return ApiKeyVerifyResponse(valid=False, error=exc.message)
    return ApiKeyVerifyResponse(valid=True)
