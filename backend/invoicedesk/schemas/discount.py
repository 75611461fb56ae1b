"""
Discount schemas.

A discount is one of three shapes, discriminated on ``kind``:
none, percentage (0-100) or fixed amount (>= 0). The remote API stores the
flat pair ``discountType`` / ``discountValue`` on every line; models built from
API data fold that pair into the tagged variant and flatten it again on output.
"""
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from invoicedesk.utils.money import HUNDRED, ZERO, round_money, to_decimal


class DiscountKind(str, Enum):
    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class NoDiscount(BaseModel):
    kind: Literal["none"] = "none"

    @property
    def value(self) -> Decimal:
        return ZERO

    class Config:
        frozen = True


class PercentageDiscount(BaseModel):
    kind: Literal["percentage"] = "percentage"
    value: Decimal = Field(..., ge=0, le=100, description="Percent of the amount it applies to")

    class Config:
        frozen = True


class FixedDiscount(BaseModel):
    kind: Literal["fixed"] = "fixed"
    value: Decimal = Field(..., ge=0, description="Absolute amount (EUR)")

    class Config:
        frozen = True


Discount = Annotated[
    Union[NoDiscount, PercentageDiscount, FixedDiscount],
    Field(discriminator="kind"),
]


def parse_discount_kind(discount_type: Union[None, str, DiscountKind]) -> DiscountKind:
    """None/"" -> NONE; raises ValueError for anything that is not a known kind."""
    if discount_type is None or discount_type == "":
        return DiscountKind.NONE
    try:
        return DiscountKind(discount_type)
    except ValueError:
        raise ValueError(f"Unknown discount type: {discount_type!r}")


def discount_from_fields(discount_type: Any, discount_value: Any) -> Union[NoDiscount, PercentageDiscount, FixedDiscount]:
    """
    Build the tagged variant from the flat wire pair.

    A type without a positive numeric value means "no discount" (the editor
    stores the selected type before a value is typed, and a half-typed value
    such as "1," is not a number yet). Percentages above 100 are capped.
    """
    kind = parse_discount_kind(discount_type)
    if kind == DiscountKind.NONE:
        return NoDiscount()
    value = to_decimal(discount_value)
    if value <= 0:
        return NoDiscount()
    if kind == DiscountKind.PERCENTAGE:
        return PercentageDiscount(value=min(value, HUNDRED))
    return FixedDiscount(value=value)


def discount_to_fields(discount) -> Tuple[Optional[str], Optional[float]]:
    """Flatten to (discountType, discountValue); (None, None) for no discount."""
    if discount is None or discount.kind == DiscountKind.NONE.value:
        return None, None
    return discount.kind, float(discount.value)


class DiscountedLineBase(BaseModel):
    """
    Base for priced rows that carry a discount (line items, job materials,
    job time entries). Accepts both snake_case and the API's camelCase.
    """
    discount: Discount = Field(default_factory=NoDiscount)
    discount_amount: Decimal = Field(default=ZERO, ge=0)
    total: Decimal = ZERO

    @model_validator(mode="before")
    @classmethod
    def _fold_discount_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "discount" in data:
            return data
        type_key = "discountType" if "discountType" in data else "discount_type"
        value_key = "discountValue" if "discountValue" in data else "discount_value"
        if type_key not in data and value_key not in data:
            return data
        data = dict(data)
        discount_type = data.pop(type_key, None)
        discount_value = data.pop(value_key, None)
        data["discount"] = discount_from_fields(discount_type, discount_value)
        return data

    # Payload keys rounded to cents
    money_fields: ClassVar[Tuple[str, ...]] = ("discountAmount", "total")

    def to_api_dict(self) -> Dict[str, Any]:
        """camelCase payload with the discount flattened and Decimals as floats."""
        data = self.model_dump(by_alias=True, exclude={"discount"}, exclude_none=True)
        for key, value in list(data.items()):
            if isinstance(value, Decimal):
                if key in self.money_fields:
                    value = round_money(value)
                data[key] = float(value)
        discount_type, discount_value = discount_to_fields(self.discount)
        data["discountType"] = discount_type
        data["discountValue"] = discount_value
        return data

    class Config:
        alias_generator = to_camel
        populate_by_name = True
