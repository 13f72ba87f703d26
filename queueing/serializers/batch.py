from rest_framework import serializers


class BatchCreateSerializer(serializers.Serializer):
    appointmentDate = serializers.DateField()
    patientIds = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=200)
    note = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    sortByDistance = serializers.BooleanField(default=False)


class BatchRefSerializer(serializers.Serializer):
    batchId = serializers.IntegerField(min_value=1)


class BatchPatientSerializer(BatchRefSerializer):
    patientId = serializers.IntegerField(min_value=1)


class BatchMoveSerializer(BatchRefSerializer):
    fromIndex = serializers.IntegerField()
    toIndex = serializers.IntegerField()
