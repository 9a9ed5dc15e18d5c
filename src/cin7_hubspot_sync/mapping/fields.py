"""Cin7 -> HubSpot field correspondence table.

The table is data, not logic: each HubSpot property lists the Cin7 field
names that may hold its value, in priority order. The Cin7 response shape
has changed over time, so several historical variants are tried and the
first non-empty one wins. A source entry may also be a group of names whose
values are joined with a space (first + last name).

Templates and defaults are ``str.format`` strings. ``{value}`` is the
resolved source value; ``{order_id}``, ``{currency}`` and ``{synced_at}``
come from the run context.
"""

import string
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from cin7_hubspot_sync.connectors.cin7 import constants as c
from cin7_hubspot_sync.errors import ConfigError
from cin7_hubspot_sync.models.order import SourceOrder

SourceSpec = Union[str, list[str]]

CONTEXT_KEYS = frozenset({"value", "order_id", "currency", "synced_at"})

SAMPLE_CONTEXT = {
    "value": "SO-1",
    "order_id": "1",
    "currency": "USD",
    "synced_at": "2026-01-01T00:00:00.000Z",
}

# Raised by str.format for values a valid template still cannot render
FORMAT_ERRORS = (ValueError, TypeError, IndexError, KeyError, AttributeError)


def is_empty(value: Any) -> bool:
    """None and blank strings carry no value; 0 and False do."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def first_value(data: dict[str, Any], sources: Sequence[SourceSpec]) -> Any:
    """First non-empty value among the candidate field names, else None."""
    for source in sources:
        if isinstance(source, str):
            value = data.get(source)
            if isinstance(value, str):
                value = value.strip()
        else:
            parts = [str(data.get(name) or "").strip() for name in source]
            value = " ".join(p for p in parts if p)
        if not is_empty(value):
            return value
    return None


def order_id(order: SourceOrder) -> str:
    """Cin7 id from the first populated id field variant; "" when there is none."""
    value = first_value(order.data, c.ORDER_ID_FIELDS)
    return "" if value is None else str(value).strip()


def _template_keys(template: str) -> set[str]:
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


class FieldRule(BaseModel):
    """One destination property and where its value comes from."""

    property: str
    sources: list[SourceSpec] = Field(default_factory=list)
    template: Optional[str] = None
    default: Optional[str] = None

    @field_validator("template", "default")
    @classmethod
    def _known_placeholders(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            unknown = _template_keys(value) - CONTEXT_KEYS
            if unknown:
                raise ValueError(f"unknown placeholder(s): {sorted(unknown)}")
            # Cin7 values may arrive as strings, so the template must format one
            try:
                value.format(**SAMPLE_CONTEXT)
            except FORMAT_ERRORS as e:
                raise ValueError(f"template {value!r} cannot be formatted: {e}") from e
        return value

    def resolve(self, data: dict[str, Any], context: dict[str, Any]) -> Any:
        """Value for this property, or None when it should be omitted."""
        value = first_value(data, self.sources) if self.sources else None
        if is_empty(value) and self.default is not None:
            value = self.default.format(value="", **context)
        if self.template is not None:
            if self.sources and is_empty(value):
                return None
            value = self.template.format(value="" if value is None else value, **context)
        return None if is_empty(value) else value


def default_rules(unique_property: str) -> list[FieldRule]:
    """The shipped mapping. Order matters only for readability of payloads."""
    return [
        # Idempotency key (custom unique property in HubSpot)
        FieldRule(property=unique_property, template="{order_id}"),
        FieldRule(
            property="hs_order_name",
            sources=[c.REFERENCE, "Reference", *c.ORDER_ID_FIELDS],
            template="Cin7 Order {value}",
        ),
        FieldRule(
            property="hs_currency_code",
            sources=["currencyCode", "CurrencyCode"],
            default="{currency}",
        ),
        # Totals
        FieldRule(property="hs_subtotal_price", sources=[c.PRODUCT_TOTAL, "ProductTotal"]),
        FieldRule(property="hs_shipping_cost", sources=[c.FREIGHT_TOTAL, "FreightTotal"]),
        FieldRule(property="hs_total_price", sources=list(c.TOTAL_FIELDS)),
        # Shipping address
        FieldRule(
            property="hs_shipping_address_name",
            sources=[c.DELIVERY_COMPANY, [c.DELIVERY_FIRST_NAME, c.DELIVERY_LAST_NAME]],
        ),
        FieldRule(
            property="hs_shipping_address_street",
            sources=[c.DELIVERY_ADDRESS_1, c.DELIVERY_ADDRESS_2],
        ),
        FieldRule(property="hs_shipping_address_city", sources=[c.DELIVERY_CITY]),
        FieldRule(property="hs_shipping_address_state", sources=[c.DELIVERY_STATE]),
        FieldRule(property="hs_shipping_address_postal_code", sources=[c.DELIVERY_POSTAL_CODE]),
        FieldRule(property="hs_shipping_address_country", sources=[c.DELIVERY_COUNTRY]),
        # Custom cin7_* properties (dropped by the schema filter if not created)
        FieldRule(property="cin7_company", sources=[c.BILLING_COMPANY, "BillingCompany"]),
        FieldRule(property="cin7_reference", sources=[c.REFERENCE, "Reference"]),
        FieldRule(property="cin7_invoice_date", sources=[c.INVOICE_DATE, "InvoiceDate"]),
        FieldRule(property="cin7_stage", sources=[c.STAGE, "Stage"]),
        FieldRule(property="cin7_last_synced_at", template="{synced_at}"),
    ]


class FieldMap(BaseModel):
    """Ordered set of field rules, one per destination property."""

    rules: list[FieldRule] = Field(default_factory=list)

    @classmethod
    def default(cls, unique_property: str) -> "FieldMap":
        return cls(rules=default_rules(unique_property))

    @classmethod
    def from_yaml(cls, path: str | Path, unique_property: str) -> "FieldMap":
        """
        Extend the default table from YAML.

        properties:
          hs_total_price: [total, orderTotal]       # list shorthand
          hs_order_name:
            sources: [reference, id]
            template: "Order {value}"
        remove: [cin7_last_synced_at]
        """
        try:
            data = yaml.safe_load(Path(path).read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read field map {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Field map {path} must be a mapping")

        field_map = cls.default(unique_property)
        for name in data.get("remove") or []:
            if name == unique_property:
                raise ConfigError(f"Field map cannot remove the unique property {name!r}")
            field_map.remove(name)
        for name, spec in (data.get("properties") or {}).items():
            if isinstance(spec, list):
                spec = {"sources": spec}
            try:
                rule = FieldRule.model_validate({"property": name, **(spec or {})})
            except (ValueError, TypeError) as e:
                raise ConfigError(f"Invalid field map entry {name!r}: {e}") from e
            field_map.set(rule)
        return field_map

    def set(self, rule: FieldRule) -> None:
        """Replace the rule for rule.property, or append it."""
        for i, existing in enumerate(self.rules):
            if existing.property == rule.property:
                self.rules[i] = rule
                return
        self.rules.append(rule)

    def remove(self, property_name: str) -> None:
        self.rules = [r for r in self.rules if r.property != property_name]

    def properties(self) -> list[str]:
        return [r.property for r in self.rules]
