from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import RequestsClient
from utils.tests import BaseTestCase

from apps.cart.models import CartItem
from apps.cart.services.lines import line_for
from apps.cart.services.remote import CartRemoteError, HttpCartRemote
from apps.cart.services.storage import MemorySlot
from apps.cart.services.store import CartStore
from apps.products.models import ProductOption
from apps.products.services.pricing import Selection
from apps.users.session import AuthSession

BASE_URL = 'http://testserver'


class CartAPITests(BaseTestCase):
    """Remote cart rows over REST."""

    def setUp(self):
        super().setUp()
        self.brownie = self.create_brownie()
        self.cupcakes = self.create_cupcakes()
        self.list_url = reverse('cart:cart-list')
        self.add_url = reverse('cart:cart-add-item')

    def create_row(self, product=None, user=None, quantity=1, metadata=None):
        return CartItem.objects.create(
            user=user or self.user,
            product=product or self.brownie,
            quantity=quantity,
            unit_price=Decimal('4.50'),
            metadata=metadata if metadata is not None else {'topping': 'Lotus Biscoff'},
        )

    def test_requires_authentication(self):
        self.client.credentials()
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_joins_product(self):
        self.create_row(quantity=2)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        row = response.data[0]
        self.assertEqual(row['quantity'], 2)
        self.assertEqual(row['product']['name'], 'Fudge Brownies')
        self.assertEqual(row['product']['product_type'], 'brownie')
        self.assertEqual(Decimal(row['unit_price']), Decimal('4.50'))

    def test_filter_by_product(self):
        self.create_row()
        self.create_row(product=self.cupcakes)

        response = self.client.get(self.list_url, {'product_id': str(self.cupcakes.id)})

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product_id'], self.cupcakes.id)

    def test_filter_with_invalid_product_id(self):
        response = self.client.get(self.list_url, {'product_id': 'not-a-uuid'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_own_rows(self):
        other = self.create_user('other', 'other@example.com')
        row = self.create_row(user=other)

        self.assertEqual(self.client.get(self.list_url).data, [])
        response = self.client.delete(reverse('cart:cart-detail', kwargs={'pk': row.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_row(self):
        response = self.client.post(self.list_url, {
            'product_id': str(self.cupcakes.id),
            'quantity': 2,
            'unit_price': '17.2',
            'metadata': {'dietary': ['Eggless']},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        row = CartItem.objects.get(user=self.user)
        self.assertEqual(row.unit_price, Decimal('17.2'))
        self.assertEqual(row.metadata, {'dietary': ['Eggless']})

    def test_create_rejects_zero_quantity(self):
        response = self.client.post(self.list_url, {
            'product_id': str(self.cupcakes.id), 'quantity': 0, 'unit_price': '18.00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_patch_quantity(self):
        row = self.create_row()

        response = self.client.patch(reverse('cart:cart-detail', kwargs={'pk': row.pk}),
                                     {'quantity': 4, 'unit_price': '0.01'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row.refresh_from_db()
        self.assertEqual(row.quantity, 4)
        self.assertEqual(row.unit_price, Decimal('4.50'))

    def test_delete_row(self):
        row = self.create_row()

        response = self.client.delete(reverse('cart:cart-detail', kwargs={'pk': row.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CartItem.objects.filter(pk=row.pk).exists())

    def test_add_item_merges_same_customization(self):
        self.create_row(quantity=2, metadata={'base': 'Chocolate', 'topping': 'Oreo'})

        response = self.client.post(self.add_url, {
            'product_id': str(self.brownie.id),
            'quantity': 3,
            'unit_price': '4.50',
            'metadata': {'topping': 'Oreo', 'base': 'Chocolate'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 5)
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 1)

    def test_add_item_new_customization(self):
        self.create_row(metadata={'topping': 'Oreo'})

        response = self.client.post(self.add_url, {
            'product_id': str(self.brownie.id),
            'unit_price': '3.00',
            'metadata': {'topping': 'Sprinkles'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 1)
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 2)


class HttpCartRemoteTests(BaseTestCase):
    """Client-side store talking to the cart API."""

    def setUp(self):
        super().setUp()
        self.brownie = self.create_brownie()
        self.options = list(ProductOption.objects.filter(product_type=self.brownie.product_type))
        self.auth = AuthSession.for_user(self.user)
        self.remote = HttpCartRemote(BASE_URL, self.auth, http=RequestsClient())

    def test_store_round_trip(self):
        store = CartStore(MemorySlot(), remote=self.remote, auth=self.auth)
        selection = Selection(topping='Lotus Biscoff', dietary=('Gluten-Free',))

        store.add_item(line_for(self.brownie, selection, 4, self.options))
        store.add_item(line_for(self.brownie, selection, 1, self.options))

        row = CartItem.objects.get(user=self.user)
        self.assertEqual(row.quantity, 5)
        self.assertEqual(store.items[0].id, str(row.id))
        self.assertEqual(store.subtotal(), Decimal('22.50'))

        store.remove_item(row.id)
        self.assertFalse(CartItem.objects.filter(pk=row.pk).exists())

    def test_rows_are_scoped_to_token(self):
        other = self.create_user('other', 'other@example.com')
        CartItem.objects.create(user=other, product=self.brownie, quantity=1, unit_price=Decimal('3.00'))

        self.assertEqual(self.remote.list_items(self.auth.current_user_id()), [])

    def test_errors_raise_cart_remote_error(self):
        with self.assertRaises(CartRemoteError):
            self.remote.update_quantity(self.user.id, '00000000-0000-0000-0000-000000000000', 2)

        self.auth.sign_out()
        with self.assertRaises(CartRemoteError):
            self.remote.list_items(None)
