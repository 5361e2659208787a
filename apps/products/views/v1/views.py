from rest_framework import viewsets, filters, status
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAdminUser
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from apps.products.models import Category, Product, ProductOption, Review
from apps.products.serializers.serializers import (
    CategorySerializer,
    ProductSerializer,
    ProductListSerializer,
    ProductOptionSerializer,
    ReviewSerializer,
    QuoteRequestSerializer,
)
from apps.products.services import pricing
from apps.profiles.models import RecentlyViewed

MAX_REVIEWS = 5


class CatalogPermissionsMixin:
    """Reads are open to everyone; writes are staff only."""
    read_actions = ('list', 'retrieve')

    def get_permissions(self):
        if self.action in self.read_actions:
            return [AllowAny()]
        return [IsAuthenticated(), IsAdminUser()]


class CategoryViewSet(CatalogPermissionsMixin, viewsets.ModelViewSet):
    queryset = Category.objects.all().order_by('name')
    serializer_class = CategorySerializer


class ProductOptionViewSet(CatalogPermissionsMixin, viewsets.ModelViewSet):
    queryset = ProductOption.objects.all()
    serializer_class = ProductOptionSerializer
    filterset_fields = ['product_type', 'option_category', 'is_premium']


class ProductViewSet(CatalogPermissionsMixin, viewsets.ModelViewSet):
    """
    ViewSet for the bakery catalog.
    - List, retrieve, slug lookup, options, quote and review listing are open to all users
    - Posting a review needs an authenticated customer
    - Create, update and delete are restricted to staff
    """
    read_actions = ('list', 'retrieve', 'by_slug', 'options', 'quote', 'reviews')
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'product_type', 'customizable', 'is_available']
    search_fields = ['name', 'description', 'category__name']
    ordering_fields = ['base_price', 'name', 'created_at']

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductListSerializer
        return ProductSerializer

    def get_permissions(self):
        if self.action == 'reviews' and self.request.method == 'POST':
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = Product.objects.select_related('category').order_by('name')
        if not (self.request.user and self.request.user.is_staff):
            queryset = queryset.filter(is_available=True)
        return queryset

    def _track_view(self, request, product):
        if request.user and request.user.is_authenticated:
            RecentlyViewed.track(request.user, product)

    def retrieve(self, request, *args, **kwargs):
        product = self.get_object()
        self._track_view(request, product)
        return Response(self.get_serializer(product).data)

    def _options_for(self, product):
        if not product.customizable:
            return ProductOption.objects.none()
        return ProductOption.objects.filter(product_type=product.product_type)

    @action(detail=False, methods=['get'], url_path=r'slug/(?P<slug>[-\w]+)')
    def by_slug(self, request, slug=None):
        """
        Retrieve a product by its public slug (``<name>-<uuid>``).
        """
        product_id = Product.id_from_slug(slug)
        if product_id is None:
            raise NotFound("Product not found.")
        product = self.get_queryset().filter(pk=product_id).first()
        if product is None:
            raise NotFound("Product not found.")
        self._track_view(request, product)
        return Response(ProductSerializer(product, context={'request': request}).data)

    @action(detail=True, methods=['get'])
    def options(self, request, pk=None):
        """
        Customization options for the product type; empty for non-customizable products.
        """
        product = self.get_object()
        serializer = ProductOptionSerializer(self._options_for(product), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def quote(self, request, pk=None):
        """
        Price a selection without touching the cart.

        Body: {"base", "frosting", "topping", "dietary": [...], "design_notes", "quantity"}
        Returns the exact total and unit price plus their display strings ("RM 18.00").
        """
        product = self.get_object()
        params = QuoteRequestSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        selection = pricing.Selection(
            base=data['base'],
            frosting=data['frosting'],
            topping=data['topping'],
            dietary=tuple(data['dietary']),
            design_notes=data['design_notes'],
        )
        result = pricing.quote(product, selection, data['quantity'], self._options_for(product))

        return Response({
            'product_id': str(product.id),
            'quantity': result.quantity,
            'total': str(result.total),
            'unit_price': str(result.unit_price),
            'display_total': result.display_total,
            'display_unit_price': result.display_unit_price,
            'metadata': selection.to_metadata(),
        }, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get', 'post'])
    def reviews(self, request, pk=None):
        """
        GET: latest reviews of the product.
        POST: add a review as the current customer.
        """
        product = self.get_object()
        if request.method == 'POST':
            serializer = ReviewSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            serializer.save(product=product, user=request.user)
            return Response(serializer.data, status=status.HTTP_201_CREATED)

        reviews = Review.objects.filter(product=product).select_related('user__profile')[:MAX_REVIEWS]
        return Response(ReviewSerializer(reviews, many=True).data)
