"""Rate table and rate calculation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...errors import FieldValidationError, RateTableError, ShippingError
from ...schemas.rates import (
    RateCalculationRequest,
    RateCalculationResponse,
    RowErrorModel,
    TableValidationRequest,
    TableValidationResponse,
)
from ...services.shipping.service import calculate_rates, validate_rate_table

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rates", tags=["rates"])


def _to_http_error(exc: ShippingError) -> HTTPException:
    if isinstance(exc, RateTableError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": exc.message,
                "errors": [
                    RowErrorModel(row=error.row, field=error.field, message=error.message).model_dump()
                    for error in exc.errors
                ],
            },
        )
    if isinstance(exc, FieldValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": exc.message, "field": exc.field},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"message": exc.message, "code": exc.code})


@router.post("/table/validate", response_model=TableValidationResponse, status_code=status.HTTP_200_OK)
def validate_table(payload: TableValidationRequest) -> TableValidationResponse:
    try:
        return validate_rate_table(payload)
    except ShippingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/calculate", response_model=RateCalculationResponse, status_code=status.HTTP_200_OK)
def calculate(payload: RateCalculationRequest) -> RateCalculationResponse:
    try:
        return calculate_rates(payload)
    except ShippingError as exc:
        logger.info("Rejected rate calculation request: %s", exc.message)
        raise _to_http_error(exc) from exc
