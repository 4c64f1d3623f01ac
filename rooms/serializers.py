from rest_framework import serializers

from core.constants import ShareType


class AvailableRoomsQuerySerializer(serializers.Serializer):
    floor = serializers.CharField()
    share_type = serializers.ChoiceField(choices=ShareType.CHOICES)

    def validate_floor(self, value):
        return value.strip().upper()


class ExportRowSerializer(serializers.Serializer):
    floor = serializers.CharField()
    floor_label = serializers.CharField()
    room = serializers.CharField()
    room_type = serializers.CharField(allow_null=True)
    capacity = serializers.IntegerField(allow_null=True)
    occupied = serializers.IntegerField()
    available = serializers.IntegerField(allow_null=True)
    members = serializers.ListField(child=serializers.CharField())
