from rest_framework import serializers

from ..models import EntryStatus, QueueFamily, QueueType
from ..services.aggregation import TIME_FRAMES
from ..services.transitions import ACTIONS


class EntryCreateSerializer(serializers.Serializer):
    family = serializers.ChoiceField(choices=QueueFamily.values, default=QueueFamily.PHARMACY.value)
    type = serializers.CharField(max_length=30)
    serviceDate = serializers.DateField(required=False)
    patientId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    note = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class EntryListQuerySerializer(serializers.Serializer):
    family = serializers.ChoiceField(choices=QueueFamily.values, required=False)
    serviceDate = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=EntryStatus.values, required=False)
    type = serializers.CharField(max_length=30, required=False)


class EntryIdSerializer(serializers.Serializer):
    id = serializers.UUIDField()


class TransitionSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    action = serializers.ChoiceField(choices=ACTIONS)
    servicePointId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['action'] == 'transfer' and not attrs.get('servicePointId'):
            raise serializers.ValidationError({'servicePointId': 'required for transfer'})
        return attrs


class AttachmentSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    path = serializers.CharField(max_length=500, allow_blank=True)

    def validate_path(self, v):
        v = v.strip()
        if v.startswith('/') or '..' in v.split('/'):
            raise serializers.ValidationError('path must be relative to the storage root')
        return v


class TimeFrameQuerySerializer(serializers.Serializer):
    timeFrame = serializers.ChoiceField(choices=TIME_FRAMES, default='day')


class FamilyQuerySerializer(serializers.Serializer):
    family = serializers.ChoiceField(choices=QueueFamily.values, required=False)
    serviceDate = serializers.DateField(required=False)


class QueueTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = QueueType
        fields = ['id', 'family', 'code', 'name', 'prefix', 'format', 'purpose', 'enabled', 'algorithm', 'priority']


class ServicePointLinkSerializer(serializers.Serializer):
    servicePointId = serializers.IntegerField(min_value=1)
    queueTypeId = serializers.IntegerField(min_value=1)


class AccessRulesSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=100, default='allowed_ips')
    value = serializers.CharField(allow_blank=True, max_length=10000)
