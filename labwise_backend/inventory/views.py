from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from labwise_backend.core.utils import log_action

from .models import InventoryItem
from .permissions import InventoryManagerPermission, InventoryPermission
from .serializers import InventoryItemSerializer
from .services import notify_low_stock


class InventoryListCreateView(generics.ListCreateAPIView):
    permission_classes = [InventoryPermission]
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.order_by('item_name', 'id')

    def perform_create(self, serializer):
        item = serializer.save()
        log_action(self.request.user, 'INVENTORY_CREATE', 'InventoryItem', item.pk, request=self.request)


class InventoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [InventoryManagerPermission]
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.all()

    def perform_update(self, serializer):
        item = serializer.save()
        log_action(self.request.user, 'INVENTORY_UPDATE', 'InventoryItem', item.pk, request=self.request)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        item_id = item.pk
        item.delete()
        log_action(request.user, 'INVENTORY_DELETE', 'InventoryItem', item_id, request=request)
        return Response({'detail': 'Item deleted successfully.'}, status=status.HTTP_200_OK)


class CheckStockView(APIView):
    """
    GET /api/v1/inventory/check-stock/

    Notifies the lab manager about every item at or below its minimum level.
    """
    permission_classes = [InventoryManagerPermission]

    def get(self, request, *args, **kwargs):
        outcome = notify_low_stock()
        items = outcome['items']
        return Response(
            {
                'message': f'Stock check complete. {len(items)} item(s) below minimum level.',
                'notifications_sent': outcome['notifications_sent'],
                'low_stock_items': InventoryItemSerializer(items, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
