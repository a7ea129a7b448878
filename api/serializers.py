from rest_framework import serializers

from .models import FunnelSnapshot


class FunnelSnapshotSerializer(serializers.ModelSerializer):
    class Meta:
        model = FunnelSnapshot
        fields = [
            'snapshot_date', 'scope', 'stage_counts', 'total_stores',
            'funnel', 'conversion', 'daily_change', 'churn_analysis',
        ]
        read_only_fields = fields


# Response envelopes, used for OpenAPI documentation only
class ReportResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = serializers.JSONField()


class SnapshotListResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = FunnelSnapshotSerializer(many=True)


class ErrorResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=False)
    error = serializers.CharField()
