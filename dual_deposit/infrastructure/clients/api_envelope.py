from __future__ import annotations

from decimal import Decimal, InvalidOperation


class EnvelopeError(ValueError):
    pass


def unwrap_envelope(payload: object) -> dict:
    """Return `data` from a `{success, data, error, timestamp}` response body."""
    if not isinstance(payload, dict):
        raise EnvelopeError("Unexpected response body.")
    if not payload.get("success"):
        raise EnvelopeError(str(payload.get("error") or "Upstream reported failure."))
    data = payload.get("data")
    if not isinstance(data, dict):
        raise EnvelopeError("Response has no data.")
    return data


def to_decimal(value: object, *, field_name: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise EnvelopeError(f"{field_name} is missing.")
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        raise EnvelopeError(f"{field_name} is not a number: {value!r}") from exc
    if not number.is_finite():
        raise EnvelopeError(f"{field_name} is not finite: {value!r}")
    return number
