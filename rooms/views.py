from django.http import HttpResponse
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsStaffAdmin
from .inventory import get_room_inventory
from .occupancy import get_occupancy_resolver
from .reports import export_rows, summaries_as_dict, write_export_csv
from .serializers import AvailableRoomsQuerySerializer, ExportRowSerializer


class RoomViewSet(viewsets.ViewSet):
    """
    Read-only room occupancy views
    Every request builds a fresh snapshot from the active members
    """
    permission_classes = [IsAuthenticated, IsStaffAdmin]

    def get_resolver(self):
        return get_occupancy_resolver()

    def list(self, request):
        """Occupancy of every occupied room"""
        snapshot = self.get_resolver().snapshot_from_store()
        return Response({'success': True, **snapshot.as_dict()})

    @action(detail=False, methods=['get'])
    def available(self, request):
        """Rooms on a floor that can take one more member of a sharing type"""
        query = AvailableRoomsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        floor = query.validated_data['floor']
        share_type = query.validated_data['share_type']

        resolver = self.get_resolver()
        snapshot = resolver.snapshot_from_store()
        rooms = resolver.available_rooms_for(floor, share_type, snapshot)
        return Response({
            'success': True,
            'floor': floor,
            'share_type': share_type,
            'capacity': resolver.capacity_for(share_type),
            'available_rooms': rooms,
        })

    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Floor and building room counts"""
        resolver = self.get_resolver()
        snapshot = resolver.snapshot_from_store()
        return Response({'success': True, **summaries_as_dict(resolver.inventory, snapshot)})

    @action(detail=False, methods=['get'])
    def export(self, request):
        """One row per room; ``?file=csv`` downloads the rows as CSV"""
        resolver = self.get_resolver()
        rows = export_rows(resolver.inventory, resolver.snapshot_from_store())

        if request.query_params.get('file') == 'csv':
            response = HttpResponse(content_type='text/csv')
            filename = f"room_occupancy_{timezone.localdate().isoformat()}.csv"
            response['Content-Disposition'] = f'attachment; filename="{filename}"'
            write_export_csv(rows, response)
            return response

        return Response({'success': True, 'data': ExportRowSerializer(rows, many=True).data})

    @action(detail=False, methods=['get'])
    def inventory(self, request):
        """The configured room layout and sharing capacities"""
        return Response({'success': True, **get_room_inventory().as_dict()})
