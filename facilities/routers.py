"""
URL mappings for the Facility Hub API.

Trailing slashes are omitted to match the dashboard client.  Fixed paths
such as ``api/organizations/overview`` are listed before the ``<uuid:pk>``
patterns that would otherwise shadow them.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view
from .views import alerts, analytics, floor_plans, health, organizations, pois, reference, settings
from .views.dashboard import admin_dashboard

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),

    # Organizations
    path('api/organizations', organizations.organizations, name='organizations'),
    path('api/organizations/overview', organizations.organizations_overview, name='organizations_overview'),
    path('api/organizations/<uuid:pk>', organizations.organization_detail, name='organization_detail'),
    path('api/organizations/<uuid:pk>/points-of-interest', pois.organization_pois, name='organization_pois'),
    path('api/organizations/<uuid:pk>/buildings', organizations.organization_buildings,
         name='organization_buildings'),
    path('api/venue-templates', organizations.venue_templates, name='venue_templates'),

    # Points of interest
    path('api/points-of-interest/<uuid:pk>', pois.poi_detail, name='poi_detail'),

    # Reference data for selects
    path('api/reference/countries', reference.countries, name='reference_countries'),
    path('api/reference/cities', reference.cities, name='reference_cities'),
    path('api/reference/timezones', reference.timezones, name='reference_timezones'),
    path('api/reference/organization-types', reference.organization_types, name='reference_organization_types'),
    path('api/reference/poi-options', reference.poi_options, name='reference_poi_options'),

    # Map manager
    path('api/floor-plans', floor_plans.floor_plans, name='floor_plans'),
    path('api/floor-plans/<uuid:pk>', floor_plans.floor_plan_detail, name='floor_plan_detail'),
    path('api/floor-plans/<uuid:pk>/status', floor_plans.floor_plan_status, name='floor_plan_status'),

    # Alerts & geofencing
    path('api/alerts', alerts.alerts, name='alerts'),
    path('api/alerts/stats', alerts.alerts_stats, name='alerts_stats'),
    path('api/alerts/<int:pk>/acknowledge', alerts.acknowledge_alert, name='acknowledge_alert'),
    path('api/alerts/<int:pk>/resolve', alerts.resolve_alert, name='resolve_alert'),
    path('api/geofence-zones', alerts.geofence_zones, name='geofence_zones'),
    path('api/geofence-zones/<int:pk>', alerts.geofence_zone_detail, name='geofence_zone_detail'),

    # Dashboard
    path('api/users/admin/dashboard/<uuid:organization_id>', admin_dashboard, name='admin_dashboard'),

    # Analytics
    path('api/analytics/export-options', analytics.export_options, name='export_options'),
    path('api/analytics/exports', analytics.exports, name='exports'),
    path('api/analytics/report-templates', analytics.report_templates, name='report_templates'),
    path('api/analytics/reports', analytics.reports, name='reports'),
    path('api/analytics/reports/recent', analytics.recent_reports, name='recent_reports'),
    path('api/analytics/reports/<int:pk>/download', analytics.report_download, name='report_download'),
    path('api/analytics/venue/<uuid:organization_id>', analytics.venue_analytics, name='venue_analytics'),

    # Settings
    path('api/settings/profile', settings.profile, name='settings_profile'),
    path('api/settings/preferences', settings.preferences, name='settings_preferences'),
    path('api/settings/notifications', settings.notifications, name='settings_notifications'),
]
