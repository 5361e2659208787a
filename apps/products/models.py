import re

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import SlugField
from django.utils.text import slugify
from utils.models import BaseModel
from apps.users.models import User

UUID_TAIL_RE = re.compile(
    r'([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$', re.IGNORECASE
)


class Category(BaseModel):
    name = models.CharField(max_length=100)
    slug = SlugField(unique=True, blank=True)

    class Meta:
        verbose_name_plural = 'categories'

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Product(BaseModel):
    CUPCAKE_BASIC = 'cupcake_basic'
    CUPCAKE_PREMIUM = 'cupcake_premium'
    BROWNIE = 'brownie'
    PRODUCT_TYPE_CHOICES = [
        (CUPCAKE_BASIC, 'Cupcakes (basic)'),
        (CUPCAKE_PREMIUM, 'Cupcakes (premium)'),
        (BROWNIE, 'Brownies'),
        ('fruitcake', 'Fruitcake'),
        ('bread', 'Bread'),
        ('other', 'Other'),
    ]

    name = models.CharField(max_length=255)
    slug = SlugField(max_length=255, blank=True)
    description = models.TextField(blank=True, null=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='products'
    )
    product_type = models.CharField(max_length=30, choices=PRODUCT_TYPE_CHOICES, default='other')
    base_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    premium_price = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True, validators=[MinValueValidator(0)]
    )
    customizable = models.BooleanField(default=False)
    image = models.ImageField(upload_to='product_images/', blank=True, null=True)
    is_available = models.BooleanField(default=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    @property
    def public_slug(self):
        """SEO slug carrying the full id: ``cupcakes-12-pieces-<uuid>``."""
        return f"{self.slug or slugify(self.name)}-{self.id}"

    @staticmethod
    def id_from_slug(slug):
        match = UUID_TAIL_RE.search(slug or '')
        return match.group(1) if match else None

    def __str__(self):
        return self.name


class ProductOption(BaseModel):
    """
    One selectable customization for every product of a ``product_type``.
    Reference data: customers only read it.
    """
    CATEGORY_CHOICES = [
        ('base', 'Base flavor'),
        ('frosting', 'Frosting'),
        ('topping', 'Topping'),
        ('dietary', 'Dietary'),
    ]

    product_type = models.CharField(max_length=30, choices=Product.PRODUCT_TYPE_CHOICES)
    option_category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    option_name = models.CharField(max_length=100)
    is_premium = models.BooleanField(default=False)
    price_modifier = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    description = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['option_category', 'option_name']

    def __str__(self):
        return f"{self.product_type}/{self.option_category}: {self.option_name}"


class Review(BaseModel):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.rating}/5 for {self.product.name}"
