"""
Cart lines as held by the client-side cart store.

A line is "the same line" as another when both point at the same product and
carry structurally equal customization metadata. Metadata is compared through
a canonical JSON form (sorted keys, compact separators), so key order never
splits a line in two. List order inside the metadata is significant.
"""
import hashlib
import json
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from apps.products.services import pricing
from utils.uploads import public_url


def canonical_metadata(metadata: Optional[Mapping]) -> str:
    return json.dumps(metadata or {}, sort_keys=True, separators=(',', ':'), default=str)


def metadata_digest(metadata: Optional[Mapping]) -> str:
    return hashlib.sha1(canonical_metadata(metadata).encode('utf-8')).hexdigest()


def same_metadata(left: Optional[Mapping], right: Optional[Mapping]) -> bool:
    return canonical_metadata(left) == canonical_metadata(right)


def local_line_id(product_id, metadata: Optional[Mapping], price) -> str:
    """Composite id used until the line is synced to a remote row."""
    return f"{product_id}-{metadata_digest(metadata)}-{pricing.to_decimal(price)}"


@dataclass
class CartLine:
    id: str
    product_id: str
    name: str
    price: Decimal
    quantity: int = 1
    image_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.id = str(self.id)
        self.product_id = str(self.product_id)
        self.price = pricing.to_decimal(self.price)
        self.metadata = dict(self.metadata or {})

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def same_line(self, other: "CartLine") -> bool:
        return self.product_id == other.product_id and same_metadata(self.metadata, other.metadata)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['price'] = str(self.price)
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "CartLine":
        return cls(
            id=data['id'],
            product_id=data['product_id'],
            name=data['name'],
            price=data['price'],
            quantity=data.get('quantity', 1),
            image_url=data.get('image_url'),
            description=data.get('description'),
            category=data.get('category'),
            metadata=data.get('metadata') or {},
        )


def line_for(product, selection=None, quantity=1, options=(), request=None) -> CartLine:
    """
    Builds a cart line for ``quantity`` units of ``product`` customized as
    ``selection``. The stored price is the exact unit price of the quote.
    """
    selection = selection or pricing.Selection()
    quantity = pricing.clamp_quantity(quantity)
    result = pricing.quote(product, selection, quantity, options)
    metadata = selection.to_metadata()
    return CartLine(
        id=local_line_id(product.id, metadata, result.unit_price),
        product_id=product.id,
        name=product.name,
        price=result.unit_price,
        quantity=quantity,
        image_url=public_url(product.image, request),
        description=product.description,
        category=product.product_type,
        metadata=metadata,
    )


def line_from_row(row: Mapping) -> CartLine:
    """Maps a remote cart row (with its joined product) to a local line."""
    product = row.get('product') or {}
    return CartLine(
        id=row['id'],
        product_id=row['product_id'],
        name=product.get('name', ''),
        price=row['unit_price'],
        quantity=row['quantity'],
        image_url=product.get('image_url'),
        description=product.get('description'),
        category=product.get('product_type'),
        metadata=row.get('metadata') or {},
    )
