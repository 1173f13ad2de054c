"""Turn raw form strings plus resolved asset URLs into a typed record payload.

Form inputs always arrive as text. Coercion rules per field kind:
- optional text: blank -> None, never ""
- int / float: blank -> None (or the field default)
- list: comma split, items trimmed, empties dropped; nothing left -> None
- defaulted / flag: blank -> the field default

``check_fields`` runs during validation so ``compose`` itself never fails.
"""
from typing import Any, Mapping, Optional

from marketplace.services.submission.errors import ValidationError
from marketplace.services.submission.kinds import FieldKind, FieldSpec, RecordKind

_TRUE = {"true", "on", "1", "yes"}
_FALSE = {"false", "off", "0", "no"}


def parse_int(raw: str) -> int:
    """Integer parse that tolerates a float-formatted value ("12.0" -> 12)."""
    try:
        return int(raw)
    except ValueError:
        value = float(raw)
        if value != value or value in (float("inf"), float("-inf")):
            raise
        return int(value)


def parse_float(raw: str) -> float:
    value = float(raw)
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"not a finite number: {raw}")
    return value


def split_list(raw: str) -> Optional[list[str]]:
    items = [item.strip() for item in raw.split(",")]
    items = [item for item in items if item]
    return items or None


def coerce_field(spec: FieldSpec, raw: Optional[str]) -> Any:
    value = (raw or "").strip()

    if spec.kind is FieldKind.TEXT:
        return value
    if spec.kind is FieldKind.OPTIONAL_TEXT:
        return value or None
    if spec.kind is FieldKind.DEFAULTED:
        return value or spec.default
    if spec.kind is FieldKind.INT:
        return parse_int(value) if value else spec.default
    if spec.kind is FieldKind.FLOAT:
        return parse_float(value) if value else spec.default
    if spec.kind is FieldKind.LIST:
        return split_list(value)
    if spec.kind is FieldKind.FLAG:
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        return spec.default
    raise ValueError(f"Unknown field kind: {spec.kind}")


def check_fields(kind: RecordKind, fields: Mapping[str, str]) -> None:
    """Enforce the constraints a form widget would: required, numeric, choice."""
    for spec in kind.fields:
        value = (fields.get(spec.name) or "").strip()

        if spec.required:
            empty = split_list(value) is None if spec.kind is FieldKind.LIST else not value
            if empty:
                raise ValidationError(
                    "missing_field", f"{spec.name.replace('_', ' ').capitalize()} is required", spec.name,
                )
        if not value:
            continue

        if spec.kind in (FieldKind.INT, FieldKind.FLOAT):
            try:
                parse_int(value) if spec.kind is FieldKind.INT else parse_float(value)
            except ValueError:
                raise ValidationError(
                    "invalid_number", f"{spec.name.replace('_', ' ').capitalize()} must be a number", spec.name,
                ) from None
        elif spec.kind is FieldKind.FLAG and value.lower() not in _TRUE | _FALSE:
            raise ValidationError("invalid_choice", f"{spec.name} must be true or false", spec.name)

        if spec.choices and value not in spec.choices:
            raise ValidationError(
                "invalid_choice", f"Unknown {spec.name.replace('_', ' ')}: {value}", spec.name,
            )


def compose(
    kind: RecordKind,
    fields: Mapping[str, str],
    asset_urls: Mapping[str, Optional[str]],
    owner_id: str,
) -> dict:
    """Build the payload for ``kind``. Asset URLs are keyed by their record column."""
    payload = {spec.name: coerce_field(spec, fields.get(spec.name)) for spec in kind.fields}
    for slot in kind.assets:
        payload[slot.url_field] = asset_urls.get(slot.url_field)
    payload["user_id"] = owner_id
    return payload


def to_form_value(value: Any) -> str:
    """Render a stored column value back into form text (used to pre-fill edits)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)
