from django.db import models, transaction
from django.utils.timezone import now
from apps.products.models import Product
from apps.users.models import User
from utils.models import BaseModel


def default_notification_preferences():
    return {'order_updates': True, 'marketing': False, 'reminders': True}


class Profile(BaseModel):
    CONTACT_CHOICES = [
        ('whatsapp', 'WhatsApp'),
        ('phone', 'Phone'),
        ('email', 'Email'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150, blank=True, default='')
    phone = models.CharField(max_length=20)
    avatar = models.ImageField(upload_to='avatars/', blank=True, null=True)
    dob = models.DateField(blank=True, null=True)
    preferred_contact_method = models.CharField(max_length=20, choices=CONTACT_CHOICES, default='whatsapp')
    favorite_flavors = models.JSONField(default=list, blank=True)
    dietary_restrictions = models.JSONField(default=list, blank=True)
    notification_preferences = models.JSONField(default=default_notification_preferences, blank=True)

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip() or self.user.email


class Address(BaseModel):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='addresses')
    label = models.CharField(max_length=50, default='Home')
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postcode = models.CharField(max_length=10)
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ['-is_default', 'created_at']

    def save(self, *args, **kwargs):
        # One default address per user
        if self.is_default:
            Address.objects.filter(user=self.user, is_default=True).exclude(pk=self.pk).update(is_default=False)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.address_line1}, {self.city}, {self.state} {self.postcode}"


class SpecialOccasion(BaseModel):
    TYPE_CHOICES = [
        ('birthday', 'Birthday'),
        ('anniversary', 'Anniversary'),
        ('festival', 'Festival'),
        ('other', 'Other'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='occasions')
    name = models.CharField(max_length=100)
    date = models.DateField()
    occasion_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='birthday')
    reminder_enabled = models.BooleanField(default=True)

    class Meta:
        ordering = ['date']

    def __str__(self):
        return f"{self.name} ({self.date})"


class RecentlyViewed(BaseModel):
    """Products the customer opened lately; one row per product, newest first."""
    LIMIT = 10

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='recently_viewed')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='recent_views')
    viewed_at = models.DateTimeField(default=now)

    class Meta:
        ordering = ['-viewed_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'product'], name='unique_recently_viewed_product'),
        ]

    @classmethod
    @transaction.atomic
    def track(cls, user, product):
        """
        Upserts the (user, product) row with a fresh ``viewed_at`` and drops
        everything past the newest ``LIMIT`` rows of that user.
        """
        view, _ = cls.all_objects.update_or_create(
            user=user, product=product, defaults={'viewed_at': now(), 'deleted_at': None}
        )
        stale = cls.all_objects.filter(user=user).order_by('-viewed_at').values_list('pk', flat=True)[cls.LIMIT:]
        cls.all_objects.filter(pk__in=list(stale)).delete()
        return view

    def __str__(self):
        return f"{self.user_id} viewed {self.product_id}"


class Notification(BaseModel):
    TYPE_CHOICES = [
        ('order', 'Order'),
        ('system', 'System'),
        ('promo', 'Promotion'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True, default='')
    notification_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='system')
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title
