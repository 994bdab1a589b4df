"""
Django admin registrations for the facilities models.

Records are never deleted through the API; the admin is the place for
manual corrections.
"""

from django.contrib import admin

from .models import (
    ActivityEvent,
    Alert,
    Building,
    FloorPlan,
    GeneratedReport,
    GeofenceZone,
    Organization,
    PointOfInterest,
    SystemHealthCheck,
    User,
    UserPreference,
    VenueMetricSnapshot,
    VenueTemplate,
)


@admin.register(VenueTemplate)
class VenueTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'venue_type', 'is_active', 'created_at')
    list_filter = ('venue_type', 'is_active')
    search_fields = ('name',)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization_type', 'country', 'city', 'is_active', 'created_at')
    list_filter = ('organization_type', 'is_active', 'country')
    search_fields = ('name', 'email', 'city')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'organization', 'is_staff', 'is_superuser')
    list_filter = ('role', 'organization')
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(UserPreference)
class UserPreferenceAdmin(admin.ModelAdmin):
    list_display = ('user', 'language', 'theme', 'timezone', 'updated_at')


@admin.register(Building)
class BuildingAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'floors')
    list_filter = ('organization',)


@admin.register(FloorPlan)
class FloorPlanAdmin(admin.ModelAdmin):
    list_display = ('title', 'organization', 'building', 'floor_label', 'status', 'version', 'updated_at')
    list_filter = ('status', 'organization', 'is_template')
    search_fields = ('title', 'floor_label')


@admin.register(PointOfInterest)
class PointOfInterestAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'category', 'building', 'floor', 'status')
    list_filter = ('status', 'category', 'organization')
    search_fields = ('name', 'building', 'room_number')


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'organization', 'severity', 'status', 'alert_type', 'created_at')
    list_filter = ('status', 'severity', 'alert_type')
    search_fields = ('title', 'location')


@admin.register(GeofenceZone)
class GeofenceZoneAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'alert_type', 'is_active', 'trigger_count')
    list_filter = ('alert_type', 'is_active')


@admin.register(VenueMetricSnapshot)
class VenueMetricSnapshotAdmin(admin.ModelAdmin):
    list_display = ('organization', 'active_patients', 'equipment_tracked', 'navigation_requests', 'created_at')
    list_filter = ('organization',)


@admin.register(SystemHealthCheck)
class SystemHealthCheckAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'health', 'checked_at')


@admin.register(GeneratedReport)
class GeneratedReportAdmin(admin.ModelAdmin):
    list_display = ('title', 'kind', 'organization', 'file_format', 'size', 'created_at')
    list_filter = ('kind', 'file_format')


@admin.register(ActivityEvent)
class ActivityEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'organization', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
