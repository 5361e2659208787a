from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.products.models import Product, ProductOption
from apps.profiles.models import Profile

User = get_user_model()


class BaseTestCase(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser',
            email='test@example.com',
            password='testpass123'
        )
        self.profile = Profile.objects.create(
            user=self.user,
            first_name='Test',
            last_name='User',
            phone='+60123456789'
        )
        self.token = self.get_tokens_for_user(self.user)
        self.client.credentials(
            HTTP_AUTHORIZATION=f'Bearer {self.token["access"]}')

    def get_tokens_for_user(self, user):
        refresh = RefreshToken.for_user(user)
        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }

    def create_user(self, username, email, password='testpass123'):
        return User.objects.create_user(username=username, email=email, password=password)

    def create_brownie(self, **kwargs):
        """Brownies at RM 3.00 a piece, RM 4.00 with a premium topping."""
        defaults = {
            'name': 'Fudge Brownies',
            'product_type': Product.BROWNIE,
            'base_price': Decimal('3.00'),
            'premium_price': Decimal('4.00'),
            'customizable': True,
        }
        defaults.update(kwargs)
        product = Product.objects.create(**defaults)
        ProductOption.objects.create(product_type=Product.BROWNIE, option_category='topping',
                                     option_name='Lotus Biscoff', is_premium=True, price_modifier=Decimal('1.00'))
        ProductOption.objects.create(product_type=Product.BROWNIE, option_category='topping',
                                     option_name='Sprinkles', is_premium=False, price_modifier=Decimal('0.00'))
        ProductOption.objects.create(product_type=Product.BROWNIE, option_category='dietary',
                                     option_name='Gluten-Free', is_premium=True, price_modifier=Decimal('0.50'))
        return product

    def create_cupcakes(self, **kwargs):
        """Six basic cupcakes at RM 18, twelve at RM 32."""
        defaults = {
            'name': 'Classic Cupcakes',
            'product_type': Product.CUPCAKE_BASIC,
            'base_price': Decimal('18.00'),
            'premium_price': Decimal('32.00'),
            'customizable': True,
        }
        defaults.update(kwargs)
        product = Product.objects.create(**defaults)
        ProductOption.objects.create(product_type=Product.CUPCAKE_BASIC, option_category='base',
                                     option_name='Vanilla', price_modifier=Decimal('0.00'))
        ProductOption.objects.create(product_type=Product.CUPCAKE_BASIC, option_category='dietary',
                                     option_name='Eggless', price_modifier=Decimal('0.20'))
        return product
