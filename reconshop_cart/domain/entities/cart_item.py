"""
Cart item entity

A cart line is an immutable snapshot of a catalog product at a specific
variant and quantity. Changing a line produces a new ``CartItem``.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple, Union

from reconshop_cart.domain.value_objects.product_id import ProductId
from reconshop_cart.domain.value_objects.variant import Variant
from reconshop_cart.infrastructure.utilities.exceptions import ValidationError

PriceLike = Union[int, float, str, Decimal]
Identity = Tuple[int, Optional[str], Optional[str]]


def to_price(value: PriceLike) -> Decimal:
    """Convert a catalog price to a non-negative finite Decimal"""
    if isinstance(value, bool):
        raise ValueError("Unit price must be a number")
    if not isinstance(value, Decimal):
        try:
            # str() keeps floats like 19.99 exact instead of binary noise
            value = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Unit price must be a number, got {value!r}") from e
    if not value.is_finite():
        raise ValueError("Unit price must be finite")
    if value < 0:
        raise ValueError("Unit price cannot be negative")
    return value


def validate_quantity(quantity: Any) -> int:
    """Return quantity if it is an integer >= 1"""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError("Quantity must be an integer")
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")
    return quantity


def _validate_discount(discount_percent: Any) -> Optional[int]:
    if discount_percent is None:
        return None
    if isinstance(discount_percent, bool) or not isinstance(discount_percent, int):
        raise ValueError("Discount percent must be an integer")
    if not 0 <= discount_percent <= 100:
        raise ValueError("Discount percent must be between 0 and 100")
    return discount_percent


def _coerce_variant(variant: Any) -> Variant:
    if isinstance(variant, Variant):
        return variant
    return Variant.from_dict(variant)


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog data used to seed a new cart line (a cart item without quantity)"""

    product_id: int
    title: str
    unit_price: Decimal
    image: str = ""
    discount_percent: Optional[int] = None
    variant: Variant = field(default_factory=Variant)

    def __post_init__(self):
        """Validate catalog data; every rejection is a ``ValidationError`` naming the field"""
        self._check("product_id", ProductId, self.product_id)
        if not isinstance(self.title, str):
            raise ValidationError("Title must be a string", field="title")
        if not isinstance(self.image, str):
            raise ValidationError("Image must be a string", field="image")
        object.__setattr__(self, "unit_price", self._check("unit_price", to_price, self.unit_price))
        object.__setattr__(
            self, "discount_percent", self._check("discount_percent", _validate_discount, self.discount_percent)
        )
        object.__setattr__(self, "variant", self._check("variant", _coerce_variant, self.variant))

    @staticmethod
    def _check(field_name: str, convert, value: Any) -> Any:
        try:
            return convert(value)
        except ValueError as e:
            raise ValidationError(str(e), field=field_name) from e

    @property
    def identity(self) -> Identity:
        return (self.product_id, self.variant.size, self.variant.color)


@dataclass(frozen=True)
class CartItem:
    """One purchasable line in the cart"""

    product_id: int
    title: str
    image: str
    unit_price: Decimal
    quantity: int
    discount_percent: Optional[int] = None
    variant: Variant = field(default_factory=Variant)

    def __post_init__(self):
        ProductId(self.product_id)
        if not isinstance(self.title, str):
            raise ValueError("Title must be a string")
        if not isinstance(self.image, str):
            raise ValueError("Image must be a string")
        object.__setattr__(self, "unit_price", to_price(self.unit_price))
        validate_quantity(self.quantity)
        object.__setattr__(self, "discount_percent", _validate_discount(self.discount_percent))
        object.__setattr__(self, "variant", _coerce_variant(self.variant))

    @classmethod
    def from_snapshot(cls, snapshot: ProductSnapshot, quantity: int) -> "CartItem":
        """Create a new line from catalog data"""
        return cls(
            product_id=snapshot.product_id,
            title=snapshot.title,
            image=snapshot.image,
            unit_price=snapshot.unit_price,
            quantity=quantity,
            discount_percent=snapshot.discount_percent,
            variant=snapshot.variant,
        )

    @property
    def identity(self) -> Identity:
        """(product_id, size, color) with variant parts normalized"""
        return (self.product_id, self.variant.size, self.variant.color)

    def with_quantity(self, quantity: int) -> "CartItem":
        """Copy of this line with a different quantity"""
        return replace(self, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the durable storage format"""
        data: Dict[str, Any] = {
            "productId": self.product_id,
            "title": self.title,
            "image": self.image,
            "unitPrice": str(self.unit_price),
            "quantity": self.quantity,
        }
        if self.discount_percent is not None:
            data["discountPercent"] = self.discount_percent
        variant = self.variant.to_dict()
        if variant:
            data["variant"] = variant
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        """
        Create from the durable storage format.

        Payloads written by the earlier storefront (``id``, ``price``,
        ``discount``, ``selectedSize``, ``selectedColor``) are also accepted.

        Raises:
            ValueError: If a required field is missing or invalid.
        """
        if not isinstance(data, dict):
            raise ValueError("Cart item must be a mapping")

        product_id = data.get("productId", data.get("id"))
        unit_price = data.get("unitPrice", data.get("price"))
        if product_id is None or unit_price is None or "quantity" not in data:
            raise ValueError(f"Cart item is missing required fields: {sorted(data)}")

        if "variant" in data:
            variant = Variant.from_dict(data["variant"])
        else:
            variant = Variant(size=data.get("selectedSize"), color=data.get("selectedColor"))

        return cls(
            product_id=product_id,
            title=data.get("title", ""),
            image=data.get("image", ""),
            unit_price=unit_price,
            quantity=data["quantity"],
            discount_percent=data.get("discountPercent", data.get("discount")),
            variant=variant,
        )
