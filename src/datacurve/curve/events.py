"""Matching of bonding curve events in executed transactions."""

from typing import Any

from datacurve.ledger.types import LedgerEvent

NEW_CURVE_CREATED = "NewCurveCreated"
TOKEN_PURCHASED = "TokenPurchased"
TOKEN_SOLD = "TokenSold"


def _event_name(event: LedgerEvent) -> str:
    # "0xpkg::bonding_curve_module::TokenPurchased" and generic forms "...<T>"
    return event.type.split("<", 1)[0].rsplit("::", 1)[-1]


def _normalize_id(value: Any) -> str:
    """Canonical form for comparing numeric curve ids and hex object ids."""
    text = str(value).strip().lower()
    if text.startswith("0x"):
        return "0x" + (text[2:].lstrip("0") or "0")
    return text.lstrip("0") or "0"


def find_curve_event(
    events: list[LedgerEvent],
    name: str,
    curve_id: int,
    curve_object_id: str,
) -> dict[str, Any] | None:
    """Return the parsed payload of the first ``name`` event for this curve.

    The event's ``curve_id`` may carry either the curve's numeric id or its
    object id.
    """
    wanted = {_normalize_id(curve_id), _normalize_id(curve_object_id)}
    for event in events:
        if _event_name(event) != name:
            continue
        raw = event.parsed_json.get("curve_id")
        if raw is None or raw == "":
            continue
        if _normalize_id(raw) in wanted:
            return event.parsed_json
    return None


def find_created_curve_id(events: list[LedgerEvent]) -> str | None:
    for event in events:
        if _event_name(event) == NEW_CURVE_CREATED:
            object_id = event.parsed_json.get("new_curve_object_id")
            if object_id:
                return str(object_id)
    return None
