"""Field-name compatibility between the legacy and current API schemas.

The API has renamed several fields over time (`campaign_name` -> `name`,
`campaign_budget` -> `budget`, numeric `creative_type` -> `type`, ...).
Callers may use either spelling; the outgoing body always carries exactly one,
the one the configured schema mode requires.
"""

from __future__ import annotations

from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict

SchemaMode = Literal["legacy", "current"]
SCHEMA_MODES: tuple[str, ...] = ("legacy", "current")

CREATIVE_TYPE_CODES: dict[str, int] = {
    "display": 0,
    "banner": 0,
    "video": 1,
    "native": 2,
}


def creative_type_code(value: Any) -> Any:
    """Map a creative type name to its numeric code.

    Unrecognized strings and non-strings pass through unchanged.
    """
    if isinstance(value, str):
        return CREATIVE_TYPE_CODES.get(value.strip().lower(), value)
    return value


class FieldAlias(BaseModel):
    """One concept with a legacy and a current field name."""

    model_config = ConfigDict(frozen=True)

    legacy: str
    current: str
    convert: Callable[[Any], Any] | None = None

    def target(self, mode: SchemaMode) -> str:
        return self.current if mode == "current" else self.legacy

    def alias(self, mode: SchemaMode) -> str:
        return self.legacy if mode == "current" else self.current


def normalize_fields(
    body: dict[str, Any],
    aliases: tuple[FieldAlias, ...],
    mode: SchemaMode,
) -> dict[str, Any]:
    """Return a copy of body with every alias rewritten to the mode's field name.

    When both spellings are present, the target spelling wins and the alias
    is dropped.
    """
    normalized = dict(body)
    for field in aliases:
        target = field.target(mode)
        other = field.alias(mode)
        if other in normalized:
            value = normalized.pop(other)
            normalized.setdefault(target, value)
        if field.convert is not None and target in normalized:
            normalized[target] = field.convert(normalized[target])
    return normalized


def get_field(body: dict[str, Any], field: FieldAlias) -> Any:
    """Value of an aliased field under either spelling, current first."""
    if body.get(field.current) is not None:
        return body[field.current]
    return body.get(field.legacy)


def set_field(body: dict[str, Any], field: FieldAlias, value: Any, mode: SchemaMode) -> None:
    """Replace an aliased field in place, leaving only the mode's spelling."""
    body.pop(field.legacy, None)
    body.pop(field.current, None)
    body[field.target(mode)] = value


CAMPAIGN_ALIASES = (
    FieldAlias(legacy="campaign_name", current="name"),
    FieldAlias(legacy="campaign_budget", current="budget"),
)

LINE_ITEM_ALIASES = (
    FieldAlias(legacy="line_item_name", current="name"),
    FieldAlias(legacy="line_item_budget", current="budget"),
)

CREATIVE_ALIASES = (
    FieldAlias(legacy="creative_name", current="name"),
    FieldAlias(legacy="creative_type", current="type", convert=creative_type_code),
    FieldAlias(legacy="creative_attributes", current="attributes"),
)


def shape_line_item_budget(body: dict[str, Any], mode: SchemaMode) -> dict[str, Any]:
    """Move the line item budget between its flat and spend_budget forms.

    The current schema budgets through `spend_budget.lifetime` (a string) and
    never receives a flat `budget`. The legacy schema needs the flat
    `line_item_budget`; a `spend_budget` on the record (daily cap, fee flag)
    is passed through untouched.
    """
    shaped = dict(body)
    if mode == "current":
        budget = shaped.pop("budget", None)
        spend_budget = shaped.get("spend_budget")
        if budget is not None:
            if not isinstance(spend_budget, dict):
                shaped["spend_budget"] = {"lifetime": str(budget), "include_fees": True}
            elif spend_budget.get("lifetime") is None:
                shaped["spend_budget"] = {**spend_budget, "lifetime": str(budget)}
        return shaped

    spend_budget = shaped.get("spend_budget")
    if isinstance(spend_budget, dict) and shaped.get("line_item_budget") is None:
        lifetime = spend_budget.get("lifetime")
        if lifetime is not None:
            shaped["line_item_budget"] = float(lifetime)
    return shaped
