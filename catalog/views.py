"""Read-only catalog endpoints: published products with live stock."""

from django.http import Http404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics

from . import selectors
from .serializers import ProductDetailSerializer, ProductListSerializer


class ProductListView(generics.ListAPIView):
    serializer_class = ProductListSerializer
    throttle_scope = "catalog"
    filter_backends = []

    def get_queryset(self):
        return selectors.list_published_products(
            category_slug=self.request.query_params.get("category"),
            search=self.request.query_params.get("q"),
        )

    @extend_schema(
        tags=["Catalog Endpoints"],
        summary="List products",
        description="Published products with active variants and their current stock.",
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, location="query", description="Filter by category slug"),
            OpenApiParameter("q", OpenApiTypes.STR, location="query", description="Search title, description or SKU"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ProductDetailView(generics.RetrieveAPIView):
    serializer_class = ProductDetailSerializer
    throttle_scope = "catalog"

    def get_object(self):
        product = selectors.get_published_product(self.kwargs["slug"])
        if product is None:
            raise Http404
        return product

    @extend_schema(tags=["Catalog Endpoints"], summary="Get product by slug")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
