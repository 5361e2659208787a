"""
Business object for orders.

Checkout turns the customer's remote cart rows into one order. Every row is
priced again on the server from the product, its options and the row's
customization metadata; the unit price stored on the row by the client is
never trusted. On success the cart rows are removed.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models.query import QuerySet

from apps.cart.models import CartItem
from apps.orders.models import Order, OrderItem
from apps.products.models import ProductOption
from apps.products.services import pricing
from apps.profiles.models import Address, Notification
from utils.uploads import RECEIPT_TYPES, owner_filename, validate_upload

from django.contrib.auth import get_user_model
User = get_user_model()

logger = logging.getLogger(__name__)


@dataclass
class OrderResultDTO:
    """Outcome of a checkout attempt."""
    success: bool
    order: Optional[Order] = None
    error_message: Optional[str] = None
    item_errors: List[Dict] = field(default_factory=list)


@dataclass
class CheckoutInputDTO:
    user_id: str
    delivery_type: str = Order.PICKUP
    address_id: Optional[str] = None
    contact: Dict = field(default_factory=dict)


@dataclass
class PricedLineDTO:
    row: CartItem
    quote: pricing.Quote


class CartPricer:
    """
    Prices cart rows with the current catalog.
    """

    @staticmethod
    def price_rows(rows) -> Tuple[List[PricedLineDTO], List[Dict]]:
        priced, errors = [], []
        for row in rows:
            product = row.product
            if not product.is_available:
                errors.append(CartPricer._create_error(row, 'unavailable_product',
                                                       f"{product.name} is not available right now"))
                continue

            options = CartPricer._options_for(product)
            selection = pricing.Selection.from_metadata(row.metadata)
            quantity = pricing.clamp_quantity(row.quantity)
            priced.append(PricedLineDTO(row, pricing.quote(product, selection, quantity, options)))
        return priced, errors

    @staticmethod
    def _options_for(product):
        if not product.customizable:
            return []
        return list(ProductOption.objects.filter(product_type=product.product_type))

    @staticmethod
    def _create_error(row, error_type, message) -> Dict:
        return {
            'cart_item_id': str(row.id),
            'product_id': str(row.product_id),
            'error_type': error_type,
            'message': message,
        }


class AddressService:

    @staticmethod
    def resolve(delivery_type: str, address_id, user) -> Tuple[Optional[Address], Optional[str]]:
        """Returns ``(address, error)``; pickup orders carry no address."""
        if delivery_type == Order.PICKUP:
            return None, None
        if not address_id:
            return None, "A delivery address is required for delivery orders."
        address = Address.objects.filter(pk=address_id, user=user).first()
        if address is None:
            return None, "The address does not belong to you."
        return address, None


class OrderCreator:

    @staticmethod
    @transaction.atomic
    def create_order(user, priced: List[PricedLineDTO], address: Optional[Address],
                     order_input: CheckoutInputDTO) -> Order:
        total = sum((line.quote.total for line in priced), Decimal('0'))
        order = Order.objects.create(
            user=user,
            total_amount=pricing.round_price(total),
            delivery_type=order_input.delivery_type,
            shipping_address=address,
            contact=order_input.contact,
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=line.row.product,
                product_name=line.row.product.name,
                quantity=line.quote.quantity,
                price_at_purchase=line.quote.unit_price,
                metadata=line.row.metadata,
            )
            for line in priced
        ])
        return order


class OrdersBo:
    """
    Coordinates checkout, order lookup and payment receipts.
    """

    @staticmethod
    def default_contact(user) -> Dict:
        profile = getattr(user, 'profile', None)
        return {
            'first_name': profile.first_name if profile else user.first_name,
            'last_name': profile.last_name if profile else user.last_name,
            'email': user.email,
            'phone': profile.phone if profile else '',
        }

    @transaction.atomic
    def create_order_from_cart(self, order_input: CheckoutInputDTO) -> OrderResultDTO:
        try:
            user = User.objects.get(id=order_input.user_id)
        except User.DoesNotExist:
            return OrderResultDTO(False, error_message="Invalid user.")

        rows = CartItem.objects.filter(user=user).select_related('product')
        if not rows.exists():
            return OrderResultDTO(False, error_message="Your cart is empty.")

        address, address_error = AddressService.resolve(order_input.delivery_type, order_input.address_id, user)
        if address_error:
            return OrderResultDTO(False, error_message=address_error)

        priced, item_errors = CartPricer.price_rows(rows)
        if item_errors:
            return OrderResultDTO(
                False,
                error_message="Some cart items could not be ordered.",
                item_errors=item_errors,
            )

        if not order_input.contact:
            order_input.contact = self.default_contact(user)

        order = OrderCreator.create_order(user, priced, address, order_input)
        rows.delete()
        Notification.objects.create(
            user=user,
            title="Order received",
            message=f"We received your order of {pricing.format_price(order.total_amount)}. "
                    f"Upload your payment receipt to confirm it.",
            notification_type='order',
        )
        logger.info("Order %s created for %s with %d items, total %s",
                    order.id, user.id, len(priced), order.total_amount)
        return OrderResultDTO(True, order=order)

    @transaction.atomic
    def attach_receipt(self, order: Order, file) -> Order:
        """Stores a payment receipt (image or PDF) for ``order``."""
        validate_upload(file, RECEIPT_TYPES)

        old = order.receipt.name if order.receipt else None
        order.receipt.save(owner_filename(order.user_id, file.name), file, save=False)
        order.save(update_fields=['receipt', 'updated_at'])
        if old:
            order.receipt.storage.delete(old)
        logger.info("Receipt uploaded for order %s", order.id)
        return order

    def get_user_orders(self, user_id) -> QuerySet:
        return Order.objects.filter(user_id=user_id).prefetch_related('items').order_by('-created_at')
