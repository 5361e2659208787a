"""
Remote cart tables the cart store mirrors into.

Both implementations expose the same row-level operations and return rows
shaped like ``CartItemSerializer`` output (``id``, ``product_id``,
``quantity``, ``unit_price``, ``metadata`` and the joined ``product``).
Every failure surfaces as ``CartRemoteError``.
"""
import logging
from typing import List, Optional

import requests
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import DatabaseError

from apps.cart.models import CartItem
from apps.cart.serializers import CartItemSerializer

logger = logging.getLogger(__name__)


class CartRemoteError(Exception):
    """A remote cart read or write failed."""


class ModelCartRemote:
    """Server-side remote working on ``CartItem`` rows through the ORM."""

    errors = (DatabaseError, ObjectDoesNotExist, DjangoValidationError, ValueError)

    def __init__(self, request=None):
        self.request = request

    def _serialize(self, rows, many=False):
        return CartItemSerializer(rows, many=many, context={'request': self.request}).data

    def _rows(self, user_id):
        return CartItem.objects.filter(user_id=user_id).select_related('product')

    def list_items(self, user_id) -> List[dict]:
        try:
            return list(self._serialize(self._rows(user_id), many=True))
        except self.errors as e:
            raise CartRemoteError(f"Could not list cart of {user_id}: {e}") from e

    def find_items(self, user_id, product_id) -> List[dict]:
        try:
            return list(self._serialize(self._rows(user_id).filter(product_id=product_id), many=True))
        except self.errors as e:
            raise CartRemoteError(f"Could not look up product {product_id}: {e}") from e

    def insert_item(self, user_id, product_id, quantity, unit_price, metadata) -> dict:
        try:
            row = CartItem.objects.create(
                user_id=user_id,
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                metadata=metadata or {},
            )
            return self._serialize(row)
        except self.errors as e:
            raise CartRemoteError(f"Could not insert cart row: {e}") from e

    def update_quantity(self, user_id, row_id, quantity) -> dict:
        try:
            row = self._rows(user_id).get(pk=row_id)
            row.quantity = quantity
            row.save(update_fields=['quantity', 'updated_at'])
            return self._serialize(row)
        except self.errors as e:
            raise CartRemoteError(f"Could not update cart row {row_id}: {e}") from e

    def delete_item(self, user_id, row_id):
        try:
            self._rows(user_id).get(pk=row_id).delete()
        except self.errors as e:
            raise CartRemoteError(f"Could not delete cart row {row_id}: {e}") from e


class HttpCartRemote:
    """
    Client-side remote talking to ``/api/v1/cart/`` with the session's bearer
    token. The server scopes every row to the token's user, so ``user_id`` is
    accepted only for interface parity.
    """

    def __init__(self, base_url: str, auth, http: Optional[requests.Session] = None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.auth = auth
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, row_id=None) -> str:
        if row_id is None:
            return f"{self.base_url}/api/v1/cart/"
        return f"{self.base_url}/api/v1/cart/{row_id}/"

    def _request(self, method, url, **kwargs):
        logger.debug("Cart remote %s %s", method, url)
        try:
            response = self.http.request(
                method, url, headers=self.auth.auth_headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise CartRemoteError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise CartRemoteError(f"{method} {url} returned {response.status_code}")
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CartRemoteError(f"{method} {url} returned invalid JSON") from e

    def list_items(self, user_id) -> List[dict]:
        return self._request('GET', self._url()) or []

    def find_items(self, user_id, product_id) -> List[dict]:
        return self._request('GET', self._url(), params={'product_id': str(product_id)}) or []

    def insert_item(self, user_id, product_id, quantity, unit_price, metadata) -> dict:
        return self._request('POST', self._url(), json={
            'product_id': str(product_id),
            'quantity': quantity,
            'unit_price': str(unit_price),
            'metadata': metadata or {},
        })

    def update_quantity(self, user_id, row_id, quantity) -> dict:
        return self._request('PATCH', self._url(row_id), json={'quantity': quantity})

    def delete_item(self, user_id, row_id):
        self._request('DELETE', self._url(row_id))
