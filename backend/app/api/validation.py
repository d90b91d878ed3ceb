"""Declarative request validation evaluated before route handlers run.

Routes declare an ordered list of :class:`Rule` objects; :func:`validate`
turns them into a FastAPI dependency. Every rule is evaluated by the same
interpreter (:func:`evaluate`), and any failure short-circuits the request
with HTTP 400 and a list of ``{"field", "message"}`` errors.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import json
import re
from typing import Any, Literal

from fastapi import Depends, Request

from app.core.errors import FieldError, RequestValidationFailed

NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
INTEGER_RE = re.compile(r"^[+-]?\d+$")

Location = Literal["path", "body"]

_MISSING = object()


def to_decimal(value: Any) -> Decimal | None:
    """Decimal for a numeric JSON value or numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    if isinstance(value, str) and NUMERIC_RE.match(value):
        return Decimal(value)
    return None


def _not_empty(value: Any, limit: Any = None) -> bool:
    if value is None or value is _MISSING:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return bool(value)
    return True


def _string(value: Any, limit: Any = None) -> bool:
    return isinstance(value, str)


def _max_length(value: Any, limit: Any = None) -> bool:
    # Measured after stripping, as names are stored stripped
    return isinstance(value, str) and len(value.strip()) <= limit


def _numeric(value: Any, limit: Any = None) -> bool:
    return to_decimal(value) is not None


def _integer(value: Any, limit: Any = None) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(INTEGER_RE.match(value))


def _positive(value: Any, limit: Any = None) -> bool:
    number = to_decimal(value)
    return number is not None and number > 0


def _max_value(value: Any, limit: Any = None) -> bool:
    number = to_decimal(value)
    return number is not None and number <= Decimal(str(limit))


def _max_decimals(value: Any, limit: Any = None) -> bool:
    number = to_decimal(value)
    if number is None:
        return False
    try:
        return number == number.quantize(Decimal(1).scaleb(-limit))
    except InvalidOperation:
        return False


def _boolean(value: Any, limit: Any = None) -> bool:
    return isinstance(value, bool)


CHECKS: dict[str, Callable[[Any, Any], bool]] = {
    "not_empty": _not_empty,
    "string": _string,
    "max_length": _max_length,
    "numeric": _numeric,
    "integer": _integer,
    "positive": _positive,
    "max_value": _max_value,
    "max_decimals": _max_decimals,
    "boolean": _boolean,
}

# Checks that only make sense with a bound
BOUNDED_CHECKS = frozenset({"max_length", "max_value", "max_decimals"})


@dataclass(frozen=True)
class Check:
    kind: str
    message: str
    limit: Any = None

    def __post_init__(self) -> None:
        if self.kind not in CHECKS:
            raise ValueError(f"Unknown validation check: {self.kind}")
        if self.kind in BOUNDED_CHECKS and self.limit is None:
            raise ValueError(f"Validation check {self.kind} needs a limit")

    def passes(self, value: Any) -> bool:
        return CHECKS[self.kind](value, self.limit)


@dataclass(frozen=True)
class Rule:
    """Ordered checks for a single path parameter or body field."""

    field: str
    location: Location
    checks: tuple[Check, ...]
    optional: bool = False

    def as_optional(self) -> Rule:
        return Rule(self.field, self.location, self.checks, optional=True)


def path(field: str, *checks: Check) -> Rule:
    return Rule(field, "path", checks)


def body(field: str, *checks: Check, optional: bool = False) -> Rule:
    return Rule(field, "body", checks, optional=optional)


def evaluate(
    rules: tuple[Rule, ...] | list[Rule],
    path_params: Mapping[str, Any],
    payload: Mapping[str, Any],
) -> list[FieldError]:
    """Run every rule; a field stops at its first failing check."""
    errors: list[FieldError] = []
    for rule in rules:
        source = path_params if rule.location == "path" else payload
        value = source.get(rule.field, _MISSING)
        if value is _MISSING and rule.optional:
            continue
        for check in rule.checks:
            if not check.passes(value):
                errors.append(FieldError(field=rule.field, message=check.message))
                break
    return errors


async def json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; an empty body is ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise RequestValidationFailed(
            [FieldError(field="body", message="Malformed JSON body")]
        ) from None
    if not isinstance(payload, dict):
        raise RequestValidationFailed(
            [FieldError(field="body", message="Body must be a JSON object")]
        )
    return payload


def validate(*rules: Rule):
    """Build a dependency that rejects the request when any rule fails."""

    async def dependency(
        request: Request, payload: dict[str, Any] = Depends(json_body)
    ) -> None:
        errors = evaluate(rules, request.path_params, payload)
        if errors:
            raise RequestValidationFailed(errors)

    return dependency
