"""
Client-side cart store.

The store owns the shopper's cart lines, persists them to a slot after every
change and mirrors each change to a remote cart table when a user is signed
in. Local state always moves first and observers are notified before any
remote call is made. Remote writes are best effort: a ``CartRemoteError`` is
logged and the local state stands until the next successful resync, which
replaces local state with the remote rows.

Typical wiring::

    auth = AuthSession()
    store = CartStore(CacheSlot(), remote=HttpCartRemote(base_url, auth))
    store.bind_auth(auth)
"""
import logging
from decimal import Decimal
from typing import Callable, List, Optional

from apps.cart.serializers import CartLineStateSerializer
from apps.cart.services.lines import CartLine, line_from_row, same_metadata
from apps.cart.services.remote import CartRemoteError
from apps.cart.services.storage import MemorySlot
from apps.users.session import SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED

logger = logging.getLogger(__name__)

Subscriber = Callable[["CartStore"], None]


class CartStore:
    def __init__(self, slot=None, remote=None, auth=None):
        self.slot = slot if slot is not None else MemorySlot()
        self.remote = remote
        self.auth = auth
        self.items: List[CartLine] = []
        self.is_open = False
        self.is_loading = True
        self._subscribers: List[Subscriber] = []
        self._hydrate()

    # State

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Registers ``callback(store)``; returns the unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def state(self) -> dict:
        return {'items': [item.to_dict() for item in self.items], 'is_open': self.is_open}

    def get_item(self, item_id) -> Optional[CartLine]:
        item_id = str(item_id)
        return next((item for item in self.items if item.id == item_id), None)

    def _hydrate(self):
        persisted = self.slot.load() or {}
        lines = []
        for raw in persisted.get('items') or []:
            serializer = CartLineStateSerializer(data=raw)
            if not serializer.is_valid():
                logger.warning("Dropping invalid persisted cart line: %s", serializer.errors)
                continue
            lines.append(CartLine(**serializer.validated_data))
        self.items = lines
        self.is_open = bool(persisted.get('is_open', False))
        self.is_loading = False
        logger.debug("Cart hydrated with %d lines", len(lines))
        self._notify()

    def _commit(self, items=None, is_open=None):
        if items is not None:
            self.items = items
        if is_open is not None:
            self.is_open = is_open
        self.slot.save(self.state())
        self._notify()

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self)

    # Derived values

    def total_items(self) -> int:
        """Number of distinct lines, not the summed quantity."""
        return len(self.items)

    def subtotal(self) -> Decimal:
        return sum((item.price * item.quantity for item in self.items), Decimal('0'))

    # Mutations

    def add_item(self, line: CartLine):
        incoming = CartLine.from_dict(line.to_dict())
        items = list(self.items)
        existing = next((item for item in items if item.same_line(incoming)), None)
        if existing is not None:
            existing.quantity += incoming.quantity
        else:
            items.append(incoming)
        self._commit(items=items, is_open=True)

        user_id = self._remote_user()
        if user_id is not None and self._mirror('add', self._push_add, user_id, incoming):
            self.sync_with_user()

    def remove_item(self, item_id):
        item_id = str(item_id)
        self._commit(items=[item for item in self.items if item.id != item_id])

        user_id = self._remote_user()
        if user_id is not None:
            self._mirror('remove', self.remote.delete_item, user_id, item_id)

    def update_quantity(self, item_id, quantity: int):
        if quantity <= 0:
            self.remove_item(item_id)
            return

        item_id = str(item_id)
        for item in self.items:
            if item.id == item_id:
                item.quantity = quantity
        self._commit()

        user_id = self._remote_user()
        if user_id is not None:
            self._mirror('update', self.remote.update_quantity, user_id, item_id, quantity)

    def clear_cart(self):
        """Empties local state only; remote rows stay until removed or resynced."""
        self._commit(items=[])

    def toggle_cart(self):
        self._commit(is_open=not self.is_open)

    def set_open(self, is_open: bool):
        self._commit(is_open=bool(is_open))

    def sync_with_user(self) -> bool:
        """
        Replaces local lines with the signed-in user's remote rows.
        Returns False when there is nothing to sync or the fetch failed; the
        local lines are left untouched in both cases.
        """
        user_id = self._remote_user()
        if user_id is None:
            return False
        try:
            rows = self.remote.list_items(user_id)
        except CartRemoteError:
            logger.exception("Cart resync failed for %s; keeping local state", user_id)
            return False

        self._commit(items=[line_from_row(row) for row in rows])
        return True

    # Auth

    def bind_auth(self, auth) -> Callable[[], None]:
        """
        Follows ``auth``: resync on sign in and token refresh, clear on sign
        out. Runs an initial resync and returns the unsubscribe function.
        """
        self.auth = auth
        unsubscribe = auth.on_auth_state_change(self._on_auth_event)
        self.sync_with_user()
        return unsubscribe

    def _on_auth_event(self, event, session):
        if event in (SIGNED_IN, TOKEN_REFRESHED):
            self.sync_with_user()
        elif event == SIGNED_OUT:
            self.clear_cart()

    # Remote

    def _remote_user(self):
        if self.remote is None or self.auth is None:
            return None
        return self.auth.current_user_id()

    def _mirror(self, operation, func, *args) -> bool:
        """Runs one remote write; on failure local state wins until the next resync."""
        try:
            func(*args)
        except CartRemoteError:
            logger.exception("Cart %s not mirrored to remote; keeping local state", operation)
            return False
        return True

    def _push_add(self, user_id, line: CartLine):
        rows = self.remote.find_items(user_id, line.product_id)
        match = next((row for row in rows if same_metadata(row.get('metadata'), line.metadata)), None)
        if match is not None:
            self.remote.update_quantity(user_id, match['id'], match['quantity'] + line.quantity)
        else:
            self.remote.insert_item(user_id, line.product_id, line.quantity, line.price, line.metadata)
