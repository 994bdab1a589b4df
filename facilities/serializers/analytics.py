from rest_framework import serializers

from facilities.services.analytics import DATA_CATEGORIES, DATE_RANGES, EXPORT_FORMATS, REPORT_FORMATS, REPORT_TEMPLATES


class ExportRequestSerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    category = serializers.ChoiceField(choices=[c['value'] for c in DATA_CATEGORIES],
                                       error_messages={'required': 'Select a data category'})
    dateRange = serializers.ChoiceField(choices=[r['value'] for r in DATE_RANGES], default='last_30_days')
    format = serializers.ChoiceField(choices=EXPORT_FORMATS, default='csv')


class ReportRequestSerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    template = serializers.ChoiceField(choices=[t['value'] for t in REPORT_TEMPLATES],
                                       error_messages={'required': 'Select a report template'})
    title = serializers.CharField(required=False, allow_blank=True, max_length=160)
    sections = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    dateRange = serializers.ChoiceField(choices=[r['value'] for r in DATE_RANGES], default='last_30_days')
    format = serializers.ChoiceField(choices=REPORT_FORMATS, default='json')

    def validate(self, attrs):
        template = next(t for t in REPORT_TEMPLATES if t['value'] == attrs['template'])
        allowed = set(template['sections'])
        sections = attrs.get('sections') or list(template['sections'])
        unknown = [s for s in sections if s not in allowed]
        if unknown:
            raise serializers.ValidationError({'sections': [f"Unknown section: {', '.join(unknown)}"]})
        attrs['sections'] = sections
        return attrs


class VenueAnalyticsQuerySerializer(serializers.Serializer):
    range = serializers.ChoiceField(choices=[r['value'] for r in DATE_RANGES], default='last_7_days')
