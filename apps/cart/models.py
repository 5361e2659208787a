from django.core.validators import MinValueValidator
from django.db import models
from utils.models import BaseModel
from apps.users.models import User
from apps.products.models import Product


class CartItem(BaseModel):
    """
    One remote cart row. The same product may appear on several rows, one per
    distinct customization (``metadata``); rows are merged by the client on
    product + canonical metadata equality.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='cart_items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=4, validators=[MinValueValidator(0)])
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['created_at']

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.product.name} for {self.user.email}"
