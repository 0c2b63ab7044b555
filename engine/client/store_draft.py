"""
Editable working copy of a generated store.

Holds what the product editor changes between generations. A new generation
replaces the whole draft; edits never survive it.
"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from services.store_schema import Product, ProductImages

MAX_STORE_NAME_LENGTH = 100
MAX_PRODUCT_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_PRICE = 999999


class DraftValidationError(ValueError):
    """An edit would leave the draft in a state the editor does not allow"""


def _check_text(value: Any, label: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise DraftValidationError(f"{label} is required")
    value = value.strip()
    if len(value) > max_length:
        raise DraftValidationError(f"{label} must be less than {max_length} characters")
    return value


def _check_price(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DraftValidationError("Price must be a number")
    if value < 0:
        raise DraftValidationError("Price must be positive")
    if value > MAX_PRICE:
        raise DraftValidationError("Price is too high")
    return float(value)


class StoreDraft:
    """Store name plus product list, edited in place"""

    def __init__(self, store_name: str = "", products: Optional[List[Product]] = None):
        self.store_name = store_name
        self.products: List[Product] = list(products or [])

    def replace(self, store_name: str, products: List[Product]) -> None:
        """Swap in freshly generated content, discarding earlier edits"""
        self.store_name = store_name
        self.products = list(products)

    def get_product(self, product_id: int) -> Product:
        for product in self.products:
            if product.id == product_id:
                return product
        raise KeyError(product_id)

    def rename_store(self, name: str) -> None:
        self.store_name = _check_text(name, "Store name", MAX_STORE_NAME_LENGTH)

    def update_product(self, product_id: int, **changes: Any) -> Product:
        """
        Apply editor changes to one product.

        Accepts name, description, price and images (a dict with front, back
        and side). Unknown fields are rejected.
        """
        allowed = {"name", "description", "price", "images"}
        unknown = set(changes) - allowed
        if unknown:
            raise DraftValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")

        product = self.get_product(product_id)
        data = product.model_dump()

        if "name" in changes:
            data["name"] = _check_text(changes["name"], "Product name", MAX_PRODUCT_NAME_LENGTH)
        if "description" in changes:
            data["description"] = _check_text(changes["description"], "Description", MAX_DESCRIPTION_LENGTH)
        if "price" in changes:
            data["price"] = _check_price(changes["price"])
        if "images" in changes:
            images = dict(data["images"])
            images.update(changes["images"] or {})
            data["images"] = images

        try:
            updated = Product.model_validate(data)
        except ValidationError as e:
            raise DraftValidationError(str(e))

        index = self.products.index(product)
        self.products[index] = updated
        return updated

    def add_product(self, name: str, description: str, price: float, images: Dict[str, str] = None) -> Product:
        next_id = max((p.id for p in self.products), default=0) + 1
        product = Product(
            id=next_id,
            name=_check_text(name, "Product name", MAX_PRODUCT_NAME_LENGTH),
            description=_check_text(description, "Description", MAX_DESCRIPTION_LENGTH),
            price=_check_price(price),
            images=ProductImages(**(images or {}))
        )
        self.products.append(product)
        return product

    def remove_product(self, product_id: int) -> None:
        self.products.remove(self.get_product(product_id))

    def validate(self) -> None:
        """Check the whole draft before it is saved or published"""
        _check_text(self.store_name, "Store name", MAX_STORE_NAME_LENGTH)
        if not self.products:
            raise DraftValidationError("At least one product is required")
        for product in self.products:
            _check_text(product.name, "Product name", MAX_PRODUCT_NAME_LENGTH)
            _check_text(product.description, "Description", MAX_DESCRIPTION_LENGTH)
            _check_price(product.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storeName": self.store_name,
            "products": [p.to_wire() for p in self.products],
        }
