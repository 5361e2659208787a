import shutil
import tempfile
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from utils.tests import BaseTestCase

from apps.products.models import Product
from apps.profiles.models import Address, Notification, RecentlyViewed, SpecialOccasion

MEDIA_ROOT = tempfile.mkdtemp()


class ProfileTests(BaseTestCase):
    """Tests for the current customer's profile."""

    def setUp(self):
        super().setUp()
        self.profile_url = reverse('user-profile-me')

    def test_get_profile(self):
        response = self.client.get(self.profile_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Test')
        self.assertEqual(response.data['email'], 'test@example.com')
        self.assertEqual(response.data['phone'], '+60123456789')
        self.assertEqual(response.data['user'], self.user.id)
        self.assertEqual(response.data['notification_preferences'],
                         {'order_updates': True, 'marketing': False, 'reminders': True})
        self.assertIsNone(response.data['avatar_url'])
        self.assertIsNone(response.data['address'])

    def test_get_profile_unauthenticated(self):
        self.client.credentials()

        response = self.client.get(self.profile_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        response = self.client.patch(self.profile_url, {
            'first_name': 'Siti',
            'favorite_flavors': ['Pandan', 'Red Velvet'],
            'preferred_contact_method': 'email',
            'notification_preferences': {'marketing': True},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.first_name, 'Siti')
        self.assertEqual(self.profile.favorite_flavors, ['Pandan', 'Red Velvet'])
        self.assertEqual(self.profile.preferred_contact_method, 'email')
        self.assertTrue(self.profile.notification_preferences['marketing'])
        self.assertTrue(self.profile.notification_preferences['order_updates'])

    def test_update_profile_rejects_unknown_contact_method(self):
        response = self.client.patch(self.profile_url, {'preferred_contact_method': 'pigeon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_shows_default_address(self):
        Address.objects.create(user=self.user, address_line1='1 Jalan Ampang', city='Kuala Lumpur',
                               state='WP', postcode='50450', is_default=True)

        response = self.client.get(self.profile_url)

        self.assertEqual(response.data['address']['address_line1'], '1 Jalan Ampang')


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class AvatarTests(BaseTestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        super().setUp()
        self.url = reverse('user-profile-avatar')

    def upload(self, name='me.png', content=b'\x89PNG\r\n\x1a\n', content_type='image/png'):
        avatar = SimpleUploadedFile(name, content, content_type=content_type)
        return self.client.post(self.url, {'avatar': avatar}, format='multipart')

    def test_upload_avatar(self):
        response = self.upload()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.profile.refresh_from_db()
        self.assertTrue(self.profile.avatar.name.startswith(f'avatars/{self.user.id}/'))
        self.assertIsNotNone(response.data['avatar_url'])

    def test_replacing_avatar_removes_previous_file(self):
        self.upload()
        self.profile.refresh_from_db()
        first = self.profile.avatar.name

        self.upload(name='again.png')

        self.profile.refresh_from_db()
        self.assertNotEqual(self.profile.avatar.name, first)
        self.assertFalse(self.profile.avatar.storage.exists(first))

    def test_rejects_wrong_type(self):
        response = self.upload(name='notes.txt', content=b'hello', content_type='text/plain')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('file', response.data)

    @override_settings(UPLOAD_MAX_BYTES=4)
    def test_rejects_large_file(self):
        response = self.upload()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('file', response.data)

    def test_delete_avatar(self):
        self.upload()

        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.profile.refresh_from_db()
        self.assertFalse(self.profile.avatar)


class AddressTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.list_url = reverse('address-list')
        self.data = {
            'label': 'Home',
            'address_line1': '12 Jalan Bukit Bintang',
            'city': 'Kuala Lumpur',
            'state': 'WP Kuala Lumpur',
            'postcode': '55100',
            'is_default': True,
        }

    def test_create_and_list_addresses(self):
        response = self.client.post(self.list_url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(self.list_url)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['city'], 'Kuala Lumpur')

    def test_single_default_address(self):
        self.client.post(self.list_url, self.data, format='json')
        self.client.post(self.list_url, dict(self.data, label='Office'), format='json')

        defaults = Address.objects.filter(user=self.user, is_default=True)
        self.assertEqual(defaults.count(), 1)
        self.assertEqual(defaults.get().label, 'Office')

    def test_cannot_see_other_customers_addresses(self):
        other = self.create_user('other', 'other@example.com')
        address = Address.objects.create(user=other, address_line1='x', city='Ipoh', state='Perak', postcode='30000')

        response = self.client.get(reverse('address-detail', kwargs={'pk': address.pk}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_address_is_soft(self):
        address = Address.objects.create(user=self.user, address_line1='x', city='Ipoh', state='Perak', postcode='30000')

        response = self.client.delete(reverse('address-detail', kwargs={'pk': address.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Address.objects.filter(pk=address.pk).exists())
        self.assertTrue(Address.all_objects.filter(pk=address.pk).exists())


class SpecialOccasionTests(BaseTestCase):

    def test_create_and_update_occasion(self):
        response = self.client.post(reverse('occasion-list'), {
            'name': "Mum's birthday",
            'date': '2026-03-14',
            'occasion_type': 'birthday',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        occasion = SpecialOccasion.objects.get(user=self.user)
        response = self.client.patch(reverse('occasion-detail', kwargs={'pk': occasion.pk}),
                                     {'reminder_enabled': False}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        occasion.refresh_from_db()
        self.assertFalse(occasion.reminder_enabled)


class RecentlyViewedTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('recently-viewed-list')
        self.brownie = self.create_brownie()

    def create_bread(self, number):
        return Product.objects.create(name=f'Roti {number}', product_type='bread', base_price=Decimal('5.00'))

    def test_viewing_a_product_records_it(self):
        self.client.get(reverse('product-detail', kwargs={'pk': self.brownie.pk}))

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product']['name'], 'Fudge Brownies')

    def test_anonymous_views_are_not_recorded(self):
        self.client.credentials()
        self.client.get(reverse('product-detail', kwargs={'pk': self.brownie.pk}))

        self.assertFalse(RecentlyViewed.all_objects.exists())

    def test_repeat_view_refreshes_the_same_row(self):
        bread = self.create_bread(1)
        first = RecentlyViewed.track(self.user, self.brownie)
        RecentlyViewed.track(self.user, bread)

        again = RecentlyViewed.track(self.user, self.brownie)

        self.assertEqual(again.pk, first.pk)
        self.assertGreater(again.viewed_at, first.viewed_at)
        self.assertEqual(RecentlyViewed.objects.filter(user=self.user).count(), 2)
        self.assertEqual(RecentlyViewed.objects.filter(user=self.user).first().product, self.brownie)

    def test_keeps_only_the_latest_ten(self):
        breads = [self.create_bread(number) for number in range(11)]
        for bread in breads:
            RecentlyViewed.track(self.user, bread)

        kept = RecentlyViewed.all_objects.filter(user=self.user)
        self.assertEqual(kept.count(), RecentlyViewed.LIMIT)
        self.assertFalse(kept.filter(product=breads[0]).exists())
        self.assertTrue(kept.filter(product=breads[-1]).exists())

    def test_post_records_a_view(self):
        response = self.client.post(self.url, {'product_id': str(self.brownie.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product']['id'], str(self.brownie.id))
        self.assertTrue(RecentlyViewed.objects.filter(user=self.user, product=self.brownie).exists())

    def test_only_own_views_are_listed(self):
        other = self.create_user('other', 'other@example.com')
        RecentlyViewed.track(other, self.brownie)

        response = self.client.get(self.url)

        self.assertEqual(response.data, [])


class NotificationTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.list_url = reverse('notification-list')
        self.shipped = Notification.objects.create(user=self.user, title='Order ready', notification_type='order')
        self.promo = Notification.objects.create(user=self.user, title='Raya bundle', notification_type='promo')
        other = self.create_user('other', 'other@example.com')
        self.foreign = Notification.objects.create(user=other, title='Not yours')

    def test_list_own_notifications(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({item['title'] for item in response.data}, {'Order ready', 'Raya bundle'})

    def test_filter_unread(self):
        self.promo.read = True
        self.promo.save()

        response = self.client.get(self.list_url, {'read': 'false'})

        self.assertEqual([item['title'] for item in response.data], ['Order ready'])

    def test_mark_read(self):
        response = self.client.post(reverse('notification-mark-read', kwargs={'pk': self.shipped.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['read'])
        self.shipped.refresh_from_db()
        self.assertTrue(self.shipped.read)

    def test_cannot_mark_another_customers_notification(self):
        response = self.client.post(reverse('notification-mark-read', kwargs={'pk': self.foreign.pk}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read_and_unread_count(self):
        count_url = reverse('notification-unread-count')
        self.assertEqual(self.client.get(count_url).data, {'unread': 2})

        response = self.client.post(reverse('notification-mark-all-read'))

        self.assertEqual(response.data, {'updated': 2})
        self.assertEqual(self.client.get(count_url).data, {'unread': 0})
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.read)

    def test_customers_cannot_create_notifications(self):
        response = self.client.post(self.list_url, {'title': 'Free cake'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
