from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.products.services import pricing
from apps.products.services.pricing import Selection


def product(product_type, base_price, premium_price=None):
    return SimpleNamespace(
        product_type=product_type,
        base_price=Decimal(base_price),
        premium_price=Decimal(premium_price) if premium_price is not None else None,
    )


def option(category, name, modifier='0', is_premium=False):
    return SimpleNamespace(
        option_category=category,
        option_name=name,
        price_modifier=Decimal(modifier),
        is_premium=is_premium,
    )


class TieredPricingTests(SimpleTestCase):
    """Cupcake sets: one step is six pieces."""

    def setUp(self):
        self.cupcakes = product('cupcake_basic', '18.00', '32.00')
        self.options = [
            option('base', 'Vanilla'),
            option('dietary', 'Eggless', '0.20'),
            option('dietary', 'Less Sugar', '0.10'),
        ]

    def test_single_set_sells_at_base_price(self):
        self.assertEqual(pricing.calculate_total(self.cupcakes, Selection(), 1), Decimal('18.00'))

    def test_two_sets_sell_at_bundle_price(self):
        self.assertEqual(pricing.calculate_total(self.cupcakes, Selection(), 2), Decimal('32.00'))

    def test_more_sets_scale_bundle_price(self):
        self.assertEqual(pricing.calculate_total(self.cupcakes, Selection(), 3), Decimal('48.00'))
        self.assertEqual(pricing.calculate_total(self.cupcakes, Selection(), 5), Decimal('80.00'))

    def test_without_premium_price_scales_base_price(self):
        cupcakes = product('cupcake_premium', '25.00')
        self.assertEqual(pricing.calculate_total(cupcakes, Selection(), 2), Decimal('50.00'))
        self.assertEqual(pricing.calculate_total(cupcakes, Selection(), 3), Decimal('75.00'))

    def test_dietary_modifier_is_charged_per_piece(self):
        selection = Selection(dietary=('Eggless',))
        total = pricing.calculate_total(self.cupcakes, selection, 2, self.options)
        self.assertEqual(total, Decimal('34.40'))

    def test_unit_price_round_trips_for_every_quantity(self):
        selection = Selection(dietary=('Eggless', 'Less Sugar'))
        for quantity in range(1, 13):
            result = pricing.quote(self.cupcakes, selection, quantity, self.options)
            self.assertEqual(result.unit_price * quantity, result.total, quantity)

    def test_unknown_dietary_option_costs_nothing(self):
        selection = Selection(dietary=('Vegan',))
        self.assertEqual(pricing.calculate_total(self.cupcakes, selection, 1, self.options), Decimal('18.00'))


class PerPiecePricingTests(SimpleTestCase):
    """Brownies: a premium topping replaces the per-piece price."""

    def setUp(self):
        self.brownie = product('brownie', '3.00', '4.00')
        self.options = [
            option('topping', 'Lotus Biscoff', '1.00', is_premium=True),
            option('topping', 'Sprinkles', '0.00'),
            option('dietary', 'Gluten-Free', '0.50', is_premium=True),
            option('dietary', 'Nut-Free', '0.30'),
        ]

    def test_premium_topping_with_dietary_option(self):
        selection = Selection(topping='Lotus Biscoff', dietary=('Gluten-Free',))
        total = pricing.calculate_total(self.brownie, selection, 4, self.options)
        self.assertEqual(total, Decimal('18.00'))

    def test_premium_topping_substitutes_base_price(self):
        for dietary in [(), ('Gluten-Free',), ('Gluten-Free', 'Nut-Free')]:
            selection = Selection(topping='Lotus Biscoff', dietary=dietary)
            total = pricing.calculate_total(self.brownie, selection, 1, self.options)
            extras = pricing.dietary_modifier_sum(self.options, selection)
            self.assertEqual(total - extras, Decimal('4.00'))

    def test_regular_topping_keeps_base_price(self):
        selection = Selection(topping='Sprinkles')
        self.assertEqual(pricing.calculate_total(self.brownie, selection, 3, self.options), Decimal('9.00'))

    def test_no_topping_sentinel(self):
        selection = Selection(topping=pricing.NO_TOPPING)
        self.assertEqual(pricing.calculate_total(self.brownie, selection, 2, self.options), Decimal('6.00'))

    def test_premium_topping_without_premium_price(self):
        brownie = product('brownie', '3.00')
        selection = Selection(topping='Lotus Biscoff')
        self.assertEqual(pricing.calculate_total(brownie, selection, 2, self.options), Decimal('6.00'))


class PerUnitPricingTests(SimpleTestCase):

    def test_dietary_modifier_scales_with_quantity(self):
        bread = product('bread', '10.00')
        options = [option('dietary', 'Wholemeal', '1.00')]
        selection = Selection(dietary=('Wholemeal',))
        self.assertEqual(pricing.calculate_total(bread, selection, 3, options), Decimal('33.00'))

    def test_no_selection_is_base_price_times_quantity(self):
        fruitcake = product('fruitcake', '45.50')
        self.assertEqual(pricing.calculate_total(fruitcake, None, 2), Decimal('91.00'))


class HelperTests(SimpleTestCase):

    def test_clamp_quantity(self):
        self.assertEqual(pricing.clamp_quantity(0), 1)
        self.assertEqual(pricing.clamp_quantity(-4), 1)
        self.assertEqual(pricing.clamp_quantity('3'), 3)
        self.assertEqual(pricing.clamp_quantity('abc'), 1)

    def test_format_price_rounds_only_for_display(self):
        result = pricing.quote(product('cupcake_basic', '18.00', '32.50'), Selection(), 3)
        self.assertEqual(result.total, Decimal('48.75'))
        self.assertEqual(pricing.format_price(Decimal('12.5')), 'RM 12.50')
        self.assertEqual(pricing.format_price(Decimal('1') / 3), 'RM 0.33')

    def test_selection_metadata(self):
        selection = Selection(base='Chocolate', dietary=('Nut-Free', 'Eggless', 'Nut-Free'))
        metadata = selection.to_metadata()

        self.assertEqual(metadata['dietary'], ['Eggless', 'Nut-Free'])
        self.assertEqual(metadata['topping'], pricing.NO_TOPPING)
        self.assertEqual(Selection.from_metadata(metadata).dietary_names(), ('Eggless', 'Nut-Free'))
        self.assertEqual(Selection.from_metadata(None), Selection())
