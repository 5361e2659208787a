import shutil
import tempfile
from decimal import Decimal
from pathlib import Path

from django.core.cache import cache
from django.test import TestCase
from utils.tests import BaseTestCase

from apps.cart.models import CartItem
from apps.cart.services.lines import CartLine, line_for, metadata_digest
from apps.cart.services.remote import CartRemoteError, ModelCartRemote
from apps.cart.services.storage import CacheSlot, FileSlot, MemorySlot
from apps.cart.services.store import CartStore
from apps.products.models import ProductOption
from apps.products.services.pricing import Selection
from apps.users.session import AuthSession


def make_line(product_id='p-1', price='4.50', quantity=1, metadata=None, line_id=None):
    metadata = metadata if metadata is not None else {'topping': 'Lotus Biscoff'}
    return CartLine(
        id=line_id or f"{product_id}-{metadata_digest(metadata)}-{price}",
        product_id=product_id,
        name='Fudge Brownies',
        price=Decimal(price),
        quantity=quantity,
        metadata=metadata,
    )


class BrokenRemote:
    """Remote whose every call fails."""

    def __init__(self):
        self.calls = []

    def _fail(self, name):
        self.calls.append(name)
        raise CartRemoteError(f"{name} unavailable")

    def list_items(self, user_id):
        self._fail('list_items')

    def find_items(self, user_id, product_id):
        self._fail('find_items')

    def insert_item(self, user_id, product_id, quantity, unit_price, metadata):
        self._fail('insert_item')

    def update_quantity(self, user_id, row_id, quantity):
        self._fail('update_quantity')

    def delete_item(self, user_id, row_id):
        self._fail('delete_item')


class LocalCartTests(TestCase):
    """Anonymous cart: everything stays local."""

    def setUp(self):
        self.store = CartStore(MemorySlot())

    def test_starts_empty_and_loaded(self):
        self.assertFalse(self.store.is_loading)
        self.assertEqual(self.store.items, [])
        self.assertEqual(self.store.total_items(), 0)
        self.assertEqual(self.store.subtotal(), Decimal('0'))

    def test_same_line_merges_quantities(self):
        self.store.add_item(make_line(quantity=2))
        self.store.add_item(make_line(quantity=3))

        self.assertEqual(self.store.total_items(), 1)
        self.assertEqual(self.store.items[0].quantity, 5)
        self.assertTrue(self.store.is_open)

    def test_metadata_key_order_does_not_split_lines(self):
        self.store.add_item(make_line(metadata={'base': 'Chocolate', 'topping': 'Oreo'}))
        self.store.add_item(make_line(metadata={'topping': 'Oreo', 'base': 'Chocolate'}))

        self.assertEqual(self.store.total_items(), 1)
        self.assertEqual(self.store.items[0].quantity, 2)

    def test_different_metadata_makes_two_lines(self):
        self.store.add_item(make_line(metadata={'topping': 'Oreo'}))
        self.store.add_item(make_line(metadata={'topping': 'Lotus Biscoff'}))

        self.assertEqual(self.store.total_items(), 2)

    def test_total_items_counts_lines_not_quantity(self):
        self.store.add_item(make_line(product_id='a', quantity=4))
        self.store.add_item(make_line(product_id='b', quantity=6))

        self.assertEqual(self.store.total_items(), 2)

    def test_subtotal_is_sum_of_price_times_quantity(self):
        self.store.add_item(make_line(product_id='a', price='4.50', quantity=4))
        self.store.add_item(make_line(product_id='b', price='17.20', quantity=2))

        self.assertEqual(self.store.subtotal(), Decimal('52.40'))

    def test_update_quantity_to_zero_removes_line(self):
        self.store.add_item(make_line(product_id='a', price='4.50', quantity=4))
        self.store.add_item(make_line(product_id='b', price='2.00', quantity=1))
        line = self.store.items[0]
        before_count, before_subtotal = self.store.total_items(), self.store.subtotal()

        self.store.update_quantity(line.id, 0)

        self.assertIsNone(self.store.get_item(line.id))
        self.assertEqual(self.store.total_items(), before_count - 1)
        self.assertEqual(self.store.subtotal(), before_subtotal - Decimal('4.50') * 4)

    def test_update_quantity_overwrites(self):
        self.store.add_item(make_line(quantity=1))
        line_id = self.store.items[0].id

        self.store.update_quantity(line_id, 7)

        self.assertEqual(self.store.get_item(line_id).quantity, 7)

    def test_remove_item(self):
        self.store.add_item(make_line())

        self.store.remove_item(self.store.items[0].id)

        self.assertEqual(self.store.items, [])

    def test_clear_and_toggle(self):
        self.store.add_item(make_line())
        self.store.toggle_cart()
        self.assertFalse(self.store.is_open)
        self.store.set_open(True)
        self.assertTrue(self.store.is_open)

        self.store.clear_cart()
        self.assertEqual(self.store.items, [])

    def test_added_line_is_a_copy(self):
        line = make_line(quantity=1)
        self.store.add_item(line)
        self.store.add_item(line)

        self.assertEqual(line.quantity, 1)
        self.assertEqual(self.store.items[0].quantity, 2)

    def test_subscribers_are_notified(self):
        seen = []
        unsubscribe = self.store.subscribe(lambda store: seen.append(store.total_items()))

        self.store.add_item(make_line(product_id='a'))
        self.store.add_item(make_line(product_id='b'))
        unsubscribe()
        self.store.clear_cart()

        self.assertEqual(seen, [1, 2])

    def test_sync_without_user_does_nothing(self):
        self.store.add_item(make_line())

        self.assertFalse(self.store.sync_with_user())
        self.assertEqual(self.store.total_items(), 1)


class PersistenceTests(TestCase):

    def test_state_survives_a_new_store(self):
        slot = MemorySlot()
        store = CartStore(slot)
        store.add_item(make_line(quantity=3))

        restored = CartStore(slot)

        self.assertEqual(restored.total_items(), 1)
        self.assertEqual(restored.items[0].quantity, 3)
        self.assertEqual(restored.items[0].price, Decimal('4.50'))
        self.assertTrue(restored.is_open)
        self.assertFalse(restored.is_loading)

    def test_invalid_persisted_lines_are_dropped(self):
        good = make_line().to_dict()
        slot = MemorySlot({'items': [good, {'id': 'x', 'quantity': 0}, dict(good, price='-1')], 'is_open': False})

        store = CartStore(slot)

        self.assertEqual(store.total_items(), 1)
        self.assertFalse(store.is_open)

    def test_persisted_strings_are_coerced(self):
        slot = MemorySlot({'items': [{
            'id': 'x', 'product_id': 'p', 'name': 'Fudge Brownies',
            'price': '4.50', 'quantity': '3', 'metadata': {},
        }]})

        store = CartStore(slot)

        self.assertEqual(store.items[0].quantity, 3)
        self.assertEqual(store.subtotal(), Decimal('13.50'))

        store.add_item(make_line(product_id='p', price='4.50', metadata={}))
        self.assertEqual(store.items[0].quantity, 4)

    def test_file_slot(self):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory, ignore_errors=True)
        path = Path(directory) / 'cart' / 'state.json'

        CartStore(FileSlot(path)).add_item(make_line(quantity=2))
        restored = CartStore(FileSlot(path))

        self.assertEqual(restored.items[0].quantity, 2)

    def test_file_slot_ignores_corrupt_file(self):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory, ignore_errors=True)
        path = Path(directory) / 'state.json'
        path.write_text('{not json', encoding='utf-8')

        store = CartStore(FileSlot(path))

        self.assertEqual(store.items, [])

    def test_cache_slot(self):
        cache.clear()
        CartStore(CacheSlot()).add_item(make_line(quantity=4))

        restored = CartStore(CacheSlot())

        self.assertEqual(restored.items[0].quantity, 4)


class LineForTests(BaseTestCase):

    def test_line_from_quote(self):
        brownie = self.create_brownie()
        options = ProductOption.objects.filter(product_type=brownie.product_type)
        selection = Selection(topping='Lotus Biscoff', dietary=('Gluten-Free',))

        line = line_for(brownie, selection, 4, options)

        self.assertEqual(line.price, Decimal('4.50'))
        self.assertEqual(line.price * line.quantity, Decimal('18.00'))
        self.assertEqual(line.category, 'brownie')
        self.assertTrue(line.id.startswith(f"{brownie.id}-"))
        self.assertTrue(line.id.endswith(f"-{line.price}"))

    def test_quantity_is_clamped(self):
        line = line_for(self.create_cupcakes(), None, 0)
        self.assertEqual(line.quantity, 1)
        self.assertEqual(line.price, Decimal('18.00'))


class RemoteCartTests(BaseTestCase):
    """Signed-in cart mirrored to the ``CartItem`` table."""

    def setUp(self):
        super().setUp()
        self.brownie = self.create_brownie()
        self.options = list(ProductOption.objects.filter(product_type=self.brownie.product_type))
        self.auth = AuthSession()
        self.auth.sign_in(self.user.id)
        self.store = CartStore(MemorySlot(), remote=ModelCartRemote(), auth=self.auth)

    def brownie_line(self, quantity=1, topping='Lotus Biscoff'):
        return line_for(self.brownie, Selection(topping=topping), quantity, self.options)

    def test_add_item_inserts_row_and_takes_its_id(self):
        self.store.add_item(self.brownie_line(quantity=2))

        row = CartItem.objects.get(user=self.user)
        self.assertEqual(row.quantity, 2)
        self.assertEqual(row.unit_price, Decimal('4.00'))
        self.assertEqual(self.store.items[0].id, str(row.id))
        self.assertEqual(self.store.items[0].name, 'Fudge Brownies')

    def test_add_same_line_increments_remote_row(self):
        self.store.add_item(self.brownie_line(quantity=2))
        self.store.add_item(self.brownie_line(quantity=3))

        row = CartItem.objects.get(user=self.user)
        self.assertEqual(row.quantity, 5)
        self.assertEqual(self.store.total_items(), 1)
        self.assertEqual(self.store.items[0].quantity, 5)

    def test_different_customization_makes_new_row(self):
        self.store.add_item(self.brownie_line())
        self.store.add_item(self.brownie_line(topping='Sprinkles'))

        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 2)
        self.assertEqual(self.store.total_items(), 2)

    def test_update_and_remove_are_mirrored(self):
        self.store.add_item(self.brownie_line())
        line_id = self.store.items[0].id

        self.store.update_quantity(line_id, 6)
        self.assertEqual(CartItem.objects.get(pk=line_id).quantity, 6)

        self.store.update_quantity(line_id, 0)
        self.assertFalse(CartItem.objects.filter(pk=line_id).exists())
        self.assertEqual(self.store.items, [])

    def test_remote_rows_are_scoped_to_user(self):
        other = self.create_user('other', 'other@example.com')
        row = CartItem.objects.create(user=other, product=self.brownie, quantity=1, unit_price=Decimal('3.00'))
        remote = ModelCartRemote()

        with self.assertRaises(CartRemoteError):
            remote.update_quantity(self.user.id, row.id, 9)
        with self.assertRaises(CartRemoteError):
            remote.delete_item(self.user.id, row.id)

        row.refresh_from_db()
        self.assertEqual(row.quantity, 1)
        self.assertFalse(row.is_deleted)

    def test_clear_cart_leaves_remote_rows(self):
        self.store.add_item(self.brownie_line())

        self.store.clear_cart()
        self.assertEqual(self.store.items, [])
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 1)

        self.store.sync_with_user()
        self.assertEqual(self.store.total_items(), 1)

    def test_remote_failure_keeps_optimistic_state(self):
        remote = BrokenRemote()
        store = CartStore(MemorySlot(), remote=remote, auth=self.auth)

        store.add_item(self.brownie_line(quantity=2))
        store.update_quantity(store.items[0].id, 3)

        self.assertEqual(store.items[0].quantity, 3)
        self.assertEqual(remote.calls, ['find_items', 'update_quantity'])

    def test_failed_resync_keeps_local_state(self):
        store = CartStore(MemorySlot(), remote=BrokenRemote())
        store.add_item(self.brownie_line())
        store.auth = self.auth

        self.assertFalse(store.sync_with_user())
        self.assertEqual(store.total_items(), 1)

    def test_sign_in_replaces_anonymous_items(self):
        CartItem.objects.create(user=self.user, product=self.brownie, quantity=3,
                                unit_price=Decimal('4.00'), metadata={'topping': 'Lotus Biscoff'})
        auth = AuthSession()
        store = CartStore(MemorySlot(), remote=ModelCartRemote())
        store.bind_auth(auth)
        store.add_item(make_line(product_id='anonymous-product'))

        auth.sign_in(self.user.id)

        self.assertEqual(store.total_items(), 1)
        self.assertEqual(store.items[0].product_id, str(self.brownie.id))
        self.assertEqual(store.items[0].quantity, 3)

    def test_sign_out_clears_local_state(self):
        self.store.bind_auth(self.auth)
        self.store.add_item(self.brownie_line())

        self.auth.sign_out()

        self.assertEqual(self.store.items, [])
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 1)

    def test_token_refresh_resyncs(self):
        self.store.bind_auth(self.auth)
        CartItem.objects.create(user=self.user, product=self.brownie, quantity=1,
                                unit_price=Decimal('3.00'), metadata={})

        self.auth.token_refreshed('new-access')

        self.assertEqual(self.store.total_items(), 1)
