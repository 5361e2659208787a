"""
Price calculation for bakery products.

Pure functions, no database access: callers pass the product (anything with
``product_type``, ``base_price`` and ``premium_price``) and the product-type
options already loaded. Arithmetic is done on ``Decimal`` at full precision;
rounding to cents happens only in the display helpers.

Three pricing policies, chosen by product type:

* tiered sets (cupcakes): one quantity step is a set of ``PIECES_PER_SET``
  pieces. 1 set sells at ``base_price``, 2 sets at the bundle
  ``premium_price``, more sets scale the bundle price linearly. Dietary
  modifiers are charged per physical piece.
* per piece (brownies): a premium topping replaces the per-piece price with
  ``premium_price``; dietary modifiers are added per piece.
* per unit (everything else): ``base_price`` per unit plus dietary
  modifiers per unit.

Quantity must already be clamped to ``>= 1`` (see ``clamp_quantity``).
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Tuple

PIECES_PER_SET = 6
TIERED_TYPES = ('cupcake_basic', 'cupcake_premium')
PER_PIECE_TYPES = ('brownie',)
NO_TOPPING = 'None'
CURRENCY = 'RM'

CENT = Decimal('0.01')
ZERO = Decimal('0')


def to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def clamp_quantity(value) -> int:
    """Caller-side guard: anything below one becomes one."""
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, quantity)


@dataclass(frozen=True)
class Selection:
    """A shopper's customization choices for one product."""
    base: str = ''
    frosting: str = ''
    topping: str = NO_TOPPING
    dietary: Tuple[str, ...] = field(default_factory=tuple)
    design_notes: str = ''

    def dietary_names(self) -> Tuple[str, ...]:
        """Selected dietary names, duplicates dropped, in selection order."""
        return tuple(dict.fromkeys(self.dietary))

    def to_metadata(self) -> dict:
        return {
            'base': self.base,
            'frosting': self.frosting,
            'topping': self.topping or NO_TOPPING,
            'dietary': sorted(self.dietary_names()),
            'design_notes': self.design_notes,
        }

    @classmethod
    def from_metadata(cls, metadata: Optional[Mapping]) -> "Selection":
        metadata = metadata or {}
        return cls(
            base=metadata.get('base') or '',
            frosting=metadata.get('frosting') or '',
            topping=metadata.get('topping') or NO_TOPPING,
            dietary=tuple(metadata.get('dietary') or ()),
            design_notes=metadata.get('design_notes') or '',
        )


@dataclass(frozen=True)
class Quote:
    total: Decimal
    unit_price: Decimal
    quantity: int

    @property
    def display_total(self) -> str:
        return format_price(self.total)

    @property
    def display_unit_price(self) -> str:
        return format_price(self.unit_price)


def find_option(options: Iterable, category: str, name: str):
    for option in options:
        if option.option_category == category and option.option_name == name:
            return option
    return None


def dietary_modifier_sum(options: Iterable, selection: Selection) -> Decimal:
    """Sum of the price modifiers of every selected, known dietary option."""
    options = list(options)
    total = ZERO
    for name in selection.dietary_names():
        option = find_option(options, 'dietary', name)
        if option is not None:
            total += to_decimal(option.price_modifier)
    return total


def tiered_total(product, selection: Selection, quantity: int, options: Iterable = ()) -> Decimal:
    base_price = to_decimal(product.base_price)
    premium_price = to_decimal(product.premium_price)

    if quantity == 1:
        tier_total = base_price
    elif premium_price is not None and quantity == 2:
        tier_total = premium_price
    elif premium_price is not None and quantity > 2:
        tier_total = premium_price * quantity / 2
    else:
        tier_total = base_price * quantity

    total_pieces = quantity * PIECES_PER_SET
    return tier_total + dietary_modifier_sum(options, selection) * total_pieces


def per_piece_total(product, selection: Selection, quantity: int, options: Iterable = ()) -> Decimal:
    options = list(options)
    price_per_piece = to_decimal(product.base_price)

    if selection.topping and selection.topping != NO_TOPPING:
        topping = find_option(options, 'topping', selection.topping)
        premium_price = to_decimal(product.premium_price)
        if topping is not None and topping.is_premium and premium_price is not None:
            price_per_piece = premium_price

    price_per_piece += dietary_modifier_sum(options, selection)
    return price_per_piece * quantity


def per_unit_total(product, selection: Selection, quantity: int, options: Iterable = ()) -> Decimal:
    base_total = to_decimal(product.base_price) * quantity
    return base_total + dietary_modifier_sum(options, selection) * quantity


def calculate_total(product, selection: Optional[Selection], quantity: int, options: Iterable = ()) -> Decimal:
    """Total price of ``quantity`` units of ``product`` customized as ``selection``."""
    selection = selection or Selection()
    if product.product_type in TIERED_TYPES:
        return tiered_total(product, selection, quantity, options)
    if product.product_type in PER_PIECE_TYPES:
        return per_piece_total(product, selection, quantity, options)
    return per_unit_total(product, selection, quantity, options)


def unit_price(total: Decimal, quantity: int) -> Decimal:
    """Line price stored in the cart; ``unit_price * quantity`` gives back ``total``."""
    return to_decimal(total) / quantity


def quote(product, selection: Optional[Selection], quantity: int, options: Iterable = ()) -> Quote:
    options = list(options)
    total = calculate_total(product, selection, quantity, options)
    return Quote(total=total, unit_price=unit_price(total, quantity), quantity=quantity)


def round_price(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT)


def format_price(amount, currency: str = CURRENCY) -> str:
    return f"{currency} {round_price(amount):.2f}"
