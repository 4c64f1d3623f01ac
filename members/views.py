from rest_framework import viewsets, status
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsStaffAdmin
from .serializers import MemberWriteSerializer, MemberSerializer, MemberListSerializer
from .services import MemberService


class MemberViewSet(viewsets.ViewSet):
    """
    ViewSet for Member management
    Writes go through MemberService, which enforces identity and room capacity rules
    """
    permission_classes = [IsAuthenticated, IsStaffAdmin]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_service(self):
        return MemberService()

    def list(self, request):
        """Members newest first; filter by status, gender, floor or a search term"""
        params = request.query_params
        members = self.get_service().list(
            status=params.get('status') or None,
            gender=params.get('gender') or None,
            floor=(params.get('floor') or '').upper() or None,
            search=(params.get('search') or '').strip() or None,
        )
        serializer = MemberListSerializer(members, many=True)
        return Response({'success': True, 'count': len(members), 'data': serializer.data})

    def create(self, request):
        serializer = MemberWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = self.get_service().create(
            serializer.to_dto(), profile_pic=serializer.uploaded_picture, user=request.user
        )
        return Response(
            {'success': True, 'message': 'Member added successfully',
             'data': MemberSerializer(member, context={'request': request}).data},
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        member = self.get_service().get(pk)
        return Response({'success': True, 'data': MemberSerializer(member, context={'request': request}).data})

    def update(self, request, pk=None, partial=False):
        serializer = MemberWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        member = self.get_service().update(
            pk, serializer.to_patch(), profile_pic=serializer.uploaded_picture, user=request.user
        )
        return Response({
            'success': True,
            'message': 'Member updated successfully',
            'data': MemberSerializer(member, context={'request': request}).data,
        })

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        self.get_service().remove(pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
