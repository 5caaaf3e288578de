from django.db.models import Q

from rest_framework import generics, status
from rest_framework.response import Response

from labwise_backend.catalog.models import TestCatalogItem
from labwise_backend.catalog.permissions import TestCatalogPermission
from labwise_backend.catalog.serializers import (
    TestCatalogItemReadSerializer,
    TestCatalogItemWriteSerializer,
)
from labwise_backend.core.exceptions import Conflict
from labwise_backend.core.utils import log_action


def _duplicate_code(code, exclude_pk=None):
    qs = TestCatalogItem.objects.filter(test_code__iexact=str(code or '').strip())
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


class TestCatalogListCreateView(generics.ListCreateAPIView):
    """Catalog search.

    ``?q=`` matches code or name, ``?codes=A,B`` fetches exact codes,
    ``?active=true`` hides deactivated tests.
    """

    permission_classes = [TestCatalogPermission]

    def get_queryset(self):
        qs = TestCatalogItem.objects.all()
        params = self.request.query_params

        codes = [c.strip().upper() for c in params.get('codes', '').split(',') if c.strip()]
        if codes:
            qs = qs.filter(test_code__in=codes)

        q = params.get('q', '').strip()
        if q:
            qs = qs.filter(Q(test_code__icontains=q) | Q(name__icontains=q))

        if params.get('active', '').lower() == 'true':
            qs = qs.filter(is_active=True)

        return qs.order_by('name', 'id')[:50]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return TestCatalogItemWriteSerializer
        return TestCatalogItemReadSerializer

    def create(self, request, *args, **kwargs):
        if _duplicate_code(request.data.get('test_code')):
            raise Conflict('A test with this code already exists.')

        write_serializer = TestCatalogItemWriteSerializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        item = write_serializer.save()
        log_action(request.user, 'TEST_CATALOG_CREATE', 'TestCatalogItem', item.test_code, request=request)

        return Response(TestCatalogItemReadSerializer(item).data, status=status.HTTP_201_CREATED)


class TestCatalogDetailView(generics.RetrieveUpdateDestroyAPIView):
    """Retrieve, update or deactivate a catalog entry."""

    permission_classes = [TestCatalogPermission]
    queryset = TestCatalogItem.objects.all()

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return TestCatalogItemWriteSerializer
        return TestCatalogItemReadSerializer

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        item = self.get_object()

        if 'test_code' in request.data and _duplicate_code(request.data.get('test_code'), exclude_pk=item.pk):
            raise Conflict('A test with this code already exists.')

        write_serializer = TestCatalogItemWriteSerializer(item, data=request.data, partial=partial)
        write_serializer.is_valid(raise_exception=True)
        updated = write_serializer.save()
        log_action(request.user, 'TEST_CATALOG_UPDATE', 'TestCatalogItem', updated.test_code, request=request)

        return Response(TestCatalogItemReadSerializer(updated).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        item.is_active = False
        item.save(update_fields=['is_active', 'updated_at'])
        log_action(request.user, 'TEST_CATALOG_DEACTIVATE', 'TestCatalogItem', item.test_code, request=request)
        return Response({'detail': 'Test deactivated successfully.'}, status=status.HTTP_200_OK)
