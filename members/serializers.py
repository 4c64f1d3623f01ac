from django.core.files.storage import default_storage
from rest_framework import serializers

from core.dto import MemberDTO
from core.validators import MEMBER_FIELDS
from .models import Member

REQUIRED_FIELDS = (
    'full_name', 'gender', 'age', 'phone', 'email', 'emergency_contact',
    'address', 'occupation', 'amount', 'room_number', 'share_type',
)


def _loose_field():
    return serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)


class MemberWriteSerializer(serializers.Serializer):
    """
    Collects raw member input from JSON or multipart bodies.
    Values are validated by MemberService, which reports every field error at once.
    """
    full_name = _loose_field()
    gender = _loose_field()
    age = _loose_field()
    phone = _loose_field()
    email = _loose_field()
    emergency_contact = _loose_field()
    address = _loose_field()
    occupation = _loose_field()
    amount = _loose_field()
    room_number = _loose_field()
    floor = _loose_field()
    share_type = _loose_field()
    status = _loose_field()
    joining_date = _loose_field()
    profile_pic = serializers.FileField(required=False, allow_null=True)

    def validate(self, attrs):
        if not self.partial:
            missing = [name for name in REQUIRED_FIELDS if attrs.get(name) in (None, '')]
            if missing:
                raise serializers.ValidationError({name: ["This field is required."] for name in missing})
        return attrs

    def to_dto(self) -> MemberDTO:
        values = {name: value for name, value in self.validated_data.items()
                  if name in MEMBER_FIELDS and value not in (None, '')}
        return MemberDTO(**values)

    def to_patch(self) -> dict:
        return {name: value for name, value in self.validated_data.items()
                if name in MEMBER_FIELDS and value is not None}

    @property
    def uploaded_picture(self):
        return self.validated_data.get('profile_pic')


class MemberSerializer(serializers.ModelSerializer):
    """Serializer for Member"""
    profile_pic_url = serializers.SerializerMethodField()
    capacity = serializers.ReadOnlyField()

    class Meta:
        model = Member
        fields = [
            'id', 'full_name', 'gender', 'age', 'phone', 'email', 'emergency_contact',
            'address', 'occupation', 'amount', 'room_number', 'floor', 'share_type',
            'capacity', 'status', 'joining_date', 'profile_pic', 'profile_pic_url',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_profile_pic_url(self, obj):
        if not obj.profile_pic:
            return None
        url = default_storage.url(obj.profile_pic)
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request else url


class MemberListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list view"""

    class Meta:
        model = Member
        fields = [
            'id', 'full_name', 'phone', 'email', 'room_number', 'floor',
            'share_type', 'amount', 'status', 'joining_date', 'profile_pic'
        ]
