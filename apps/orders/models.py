from django.db import models
from utils.models import BaseModel
from django.contrib.auth import get_user_model
from apps.products.models import Product
from apps.profiles.models import Address

User = get_user_model()


class Order(BaseModel):
    """A customer order created at checkout from the remote cart."""
    PENDING_PAYMENT = 'pending_payment'
    PAID = 'paid'
    PREPARING = 'preparing'
    READY = 'ready'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (PENDING_PAYMENT, 'Pending payment'),
        (PAID, 'Paid'),
        (PREPARING, 'Preparing'),
        (READY, 'Ready'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    PICKUP = 'pickup'
    DELIVERY = 'delivery'
    DELIVERY_CHOICES = [
        (PICKUP, 'Pickup'),
        (DELIVERY, 'Delivery'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING_PAYMENT)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    delivery_type = models.CharField(max_length=10, choices=DELIVERY_CHOICES, default=PICKUP)
    shipping_address = models.ForeignKey(
        Address,
        on_delete=models.SET_NULL,
        related_name='orders',
        null=True, blank=True
    )
    contact = models.JSONField(default=dict, blank=True)
    receipt = models.FileField(upload_to='receipts/', null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.id} by {self.user.email} - Status: {self.get_status_display()}"


class OrderItem(BaseModel):
    """A purchased line; name and price are frozen at checkout time."""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        related_name='order_items',
        null=True, blank=True
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    price_at_purchase = models.DecimalField(max_digits=12, decimal_places=4)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.quantity} x {self.product_name} in Order {self.order_id}"

    def get_total(self):
        return self.price_at_purchase * self.quantity
