"""Bonding curve quote and trade endpoints.

All integer quantities cross the boundary as decimal strings so that
clients using float-based JSON numbers never lose precision. Inputs may be
decimal strings or JSON integers.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from datacurve.curve.engine import BondingCurveEngine
from datacurve.exceptions import InvalidAmount

log = structlog.get_logger(__name__)

router = APIRouter()

_DIGITS = re.compile(r"[0-9]+")


def parse_amount(name: str, value: Any) -> int:
    """Parse a non-negative integer from a decimal string or JSON integer."""
    if isinstance(value, bool):
        raise InvalidAmount(f"{name} must be a non-negative integer")
    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(f"{name} must be a non-negative integer")
        return value
    if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidAmount(f"{name} must be a non-negative integer, got {value!r}")


def _engine(request: Request) -> BondingCurveEngine:
    return request.app.state.engine


async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidAmount("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise InvalidAmount("Request body must be a JSON object")
    return body


@router.get("/{curve_id}/info")
async def get_curve_info(curve_id: str, request: Request) -> JSONResponse:
    state = await _engine(request).get_info(curve_id)
    return JSONResponse(content=state.to_response())


@router.get("/{curve_id}/current-price-scaled")
async def get_current_price(curve_id: str, request: Request) -> JSONResponse:
    price = await _engine(request).quote_current_price(curve_id)
    return JSONResponse(content={"currentPriceScaled": str(price)})


@router.get("/{curve_id}/calculate-purchase-amount")
async def calculate_purchase_amount(
    curve_id: str, request: Request, mockPaymentAmount: str = ""  # noqa: N803
) -> JSONResponse:
    payment = parse_amount("mockPaymentAmount", mockPaymentAmount)
    tokens = await _engine(request).quote_purchase_amount(curve_id, payment)
    return JSONResponse(content={"tokenAmount": str(tokens)})


@router.get("/{curve_id}/calculate-payment-required")
async def calculate_payment_required(
    curve_id: str, request: Request, tokenAmount: str = ""  # noqa: N803
) -> JSONResponse:
    tokens = parse_amount("tokenAmount", tokenAmount)
    payment = await _engine(request).quote_payment_required(curve_id, tokens)
    return JSONResponse(content={"paymentRequired": str(payment)})


@router.get("/{curve_id}/calculate-sale-return")
async def calculate_sale_return(
    curve_id: str, request: Request, tokenAmountToSell: str = ""  # noqa: N803
) -> JSONResponse:
    tokens = parse_amount("tokenAmountToSell", tokenAmountToSell)
    sale_return = await _engine(request).quote_sale_return(curve_id, tokens)
    return JSONResponse(content={"saleReturn": str(sale_return)})


@router.post("/buy")
async def buy(request: Request) -> JSONResponse:
    body = await _json_body(request)
    curve_object_id = str(body.get("bondingCurveObjectId") or "")
    payment = parse_amount("mockPaymentAmount", body.get("mockPaymentAmount"))

    result = await _engine(request).buy(curve_object_id, payment)
    log.info("buy_completed_via_api", curve_object_id=curve_object_id, digest=result.transaction_id)
    return JSONResponse(content=result.to_response("purchasedTokens"))


@router.post("/sell")
async def sell(request: Request) -> JSONResponse:
    body = await _json_body(request)
    curve_object_id = str(body.get("bondingCurveObjectId") or "")
    token_coin_id = str(body.get("tokenCoinObjectId") or "")

    result = await _engine(request).sell(curve_object_id, token_coin_id)
    log.info("sell_completed_via_api", curve_object_id=curve_object_id, digest=result.transaction_id)
    return JSONResponse(content=result.to_response("soldEventDetails"))
