from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from utils.tests import BaseTestCase

from apps.products.models import Category, Product, ProductOption, Review


class ProductModelTests(BaseTestCase):

    def test_category_slug_generation(self):
        category = Category.objects.create(name="Birthday Cakes")
        self.assertEqual(category.slug, "birthday-cakes")

    def test_public_slug_carries_id(self):
        brownie = self.create_brownie()
        self.assertEqual(brownie.public_slug, f"fudge-brownies-{brownie.id}")
        self.assertEqual(Product.id_from_slug(brownie.public_slug), str(brownie.id))
        self.assertIsNone(Product.id_from_slug('fudge-brownies'))

    def test_soft_delete_hides_product_and_reviews(self):
        brownie = self.create_brownie()
        Review.objects.create(product=brownie, user=self.user, rating=5)

        brownie.delete()

        self.assertFalse(Product.objects.filter(pk=brownie.pk).exists())
        self.assertTrue(Product.all_objects.filter(pk=brownie.pk).exists())
        self.assertFalse(Review.objects.filter(product_id=brownie.pk).exists())

        brownie.restore()
        self.assertTrue(Review.objects.filter(product_id=brownie.pk).exists())


class ProductAPITests(BaseTestCase):
    """Catalog endpoints."""

    def setUp(self):
        super().setUp()
        self.brownie = self.create_brownie()
        self.cupcakes = self.create_cupcakes()
        self.hidden = Product.objects.create(
            name='Seasonal Fruitcake', product_type='fruitcake', base_price=Decimal('45.00'), is_available=False
        )
        self.list_url = reverse('product-list')

    def test_list_products_anonymously(self):
        self.client.credentials()

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = {product['name'] for product in response.data}
        self.assertEqual(names, {'Fudge Brownies', 'Classic Cupcakes'})

    def test_filter_by_product_type(self):
        response = self.client.get(self.list_url, {'product_type': Product.BROWNIE})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([product['name'] for product in response.data], ['Fudge Brownies'])

    def test_retrieve_by_slug(self):
        url = reverse('product-by-slug', kwargs={'slug': self.brownie.public_slug})

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], str(self.brownie.id))

    def test_retrieve_by_unknown_slug(self):
        response = self.client.get(reverse('product-by-slug', kwargs={'slug': 'no-such-cake'}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_options_for_product_type(self):
        response = self.client.get(reverse('product-options', kwargs={'pk': self.brownie.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)
        self.assertTrue(all(option['product_type'] == Product.BROWNIE for option in response.data))

    def test_options_empty_for_fixed_product(self):
        bread = Product.objects.create(name='Sourdough', product_type='bread', base_price=Decimal('12.00'))
        ProductOption.objects.create(product_type='bread', option_category='dietary', option_name='Wholemeal')

        response = self.client.get(reverse('product-options', kwargs={'pk': bread.pk}))

        self.assertEqual(response.data, [])

    def test_quote_brownie(self):
        url = reverse('product-quote', kwargs={'pk': self.brownie.pk})

        response = self.client.post(url, {
            'topping': 'Lotus Biscoff',
            'dietary': ['Gluten-Free'],
            'quantity': 4,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total']), Decimal('18.00'))
        self.assertEqual(Decimal(response.data['unit_price']), Decimal('4.50'))
        self.assertEqual(response.data['display_total'], 'RM 18.00')
        self.assertEqual(response.data['display_unit_price'], 'RM 4.50')
        self.assertEqual(response.data['metadata']['dietary'], ['Gluten-Free'])

    def test_quote_cupcakes(self):
        url = reverse('product-quote', kwargs={'pk': self.cupcakes.pk})

        response = self.client.post(url, {'dietary': ['Eggless'], 'quantity': 2}, format='json')

        self.assertEqual(Decimal(response.data['total']), Decimal('34.40'))
        self.assertEqual(Decimal(response.data['unit_price']), Decimal('17.20'))
        self.assertEqual(response.data['display_total'], 'RM 34.40')

    def test_quote_rejects_zero_quantity(self):
        url = reverse('product-quote', kwargs={'pk': self.cupcakes.pk})

        response = self.client.post(url, {'quantity': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_create_product_requires_staff(self):
        response = self.client.post(self.list_url, {
            'name': 'Butter Bread', 'product_type': 'bread', 'base_price': '8.00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_creates_product_with_category_name(self):
        self.user.is_staff = True
        self.user.save()

        response = self.client.post(self.list_url, {
            'name': 'Butter Bread', 'product_type': 'bread', 'base_price': '8.00', 'category': 'Breads',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category'], 'Breads')
        self.assertTrue(Category.objects.filter(name='Breads').exists())

    def test_hidden_product_not_found_for_customers(self):
        response = self.client.get(reverse('product-detail', kwargs={'pk': self.hidden.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ReviewAPITests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.brownie = self.create_brownie()
        self.url = reverse('product-reviews', kwargs={'pk': self.brownie.pk})

    def test_post_and_list_reviews(self):
        response = self.client.post(self.url, {'rating': 5, 'comment': 'So fudgy!'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.client.credentials()
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['first_name'], 'Test')
        self.assertEqual(response.data[0]['comment'], 'So fudgy!')

    def test_rating_out_of_range(self):
        response = self.client.post(self.url, {'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_anonymous_cannot_post_review(self):
        self.client.credentials()
        response = self.client.post(self.url, {'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
