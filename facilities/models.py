"""
Database models for the Facility Hub backend.

These models capture the records the dashboard works with: organizations
and the venue templates used to create them, buildings and their floor
plans, points of interest, alerts and geofence zones, plus per-venue metric
snapshots and health checks feeding the dashboard.  JSON field names in the
API are camelCase; the model fields stay snake_case.
"""
from __future__ import annotations

import datetime
import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class VenueTemplate(models.Model):
    """A predefined configuration bundle applied when creating an organization."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    venue_type = models.CharField(max_length=32, blank=True)
    description = models.TextField(blank=True)
    config = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Organization(models.Model):
    TYPE_HOSPITAL = 'Hospital'
    TYPE_CHOICES = [
        ('Hospital', 'Hospital'),
        ('Airport', 'Airport'),
        ('Shopping Mall', 'Shopping Mall'),
        ('Open Place', 'Open Place'),
        ('Corporate', 'Corporate'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    organization_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_HOSPITAL, db_index=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    country = models.CharField(max_length=80, blank=True)
    city = models.CharField(max_length=120, blank=True)
    timezone = models.CharField(max_length=64, default='America/New_York')
    address = models.CharField(max_length=255, blank=True)
    venue_template = models.ForeignKey(
        VenueTemplate, null=True, blank=True, on_delete=models.SET_NULL, related_name='organizations'
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='organizations_created'
    )
    updated_by = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='organizations_updated'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({self.organization_type})"


class User(AbstractUser):
    """Dashboard user with a role and an optional organization binding.

    ``super`` users see every organization.  ``admin`` users manage their
    own organization and ``staff`` users may only read it.
    """
    ROLE_CHOICES = [
        ('staff', 'Staff'),
        ('admin', 'Administrator'),
        ('super', 'Super Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='staff')
    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.SET_NULL, related_name='users', db_index=True
    )
    phone = models.CharField(max_length=32, blank=True)
    job_title = models.CharField(max_length=120, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class UserPreference(models.Model):
    """Interface preferences and notification channels for one user."""
    THEME_CHOICES = [('light', 'Light'), ('dark', 'Dark'), ('system', 'System')]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='preferences')
    language = models.CharField(max_length=16, default='en')
    theme = models.CharField(max_length=10, choices=THEME_CHOICES, default='system')
    timezone = models.CharField(max_length=64, default='America/New_York')
    date_format = models.CharField(max_length=20, default='MM/DD/YYYY')
    default_page = models.CharField(max_length=64, default='dashboard')
    notify_email = models.BooleanField(default=True)
    notify_sms = models.BooleanField(default=False)
    notify_push = models.BooleanField(default=True)
    notify_sound = models.BooleanField(default=True)
    alert_digest = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Preferences({self.user_id})"


class Building(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='buildings')
    name = models.CharField(max_length=120)
    floors = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        unique_together = [('organization', 'name')]

    def __str__(self) -> str:
        return self.name


def _floor_plan_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return f"floor-plans/{instance.organization_id}/{uuid.uuid4().hex}{ext}"


class FloorPlan(models.Model):
    STATUS_DRAFT = 'Draft'
    STATUS_PUBLISHED = 'Published'
    STATUS_DISABLED = 'Disabled'
    STATUS_ARCHIVED = 'Archived'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PUBLISHED, 'Published'),
        (STATUS_DISABLED, 'Disabled'),
        (STATUS_ARCHIVED, 'Archived'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='floor_plans')
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name='floor_plans')
    title = models.CharField(max_length=120)
    floor_label = models.CharField(max_length=32)
    floor_number = models.IntegerField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    scale = models.CharField(max_length=32, blank=True)
    description = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    file = models.FileField(upload_to=_floor_plan_upload, max_length=512, blank=True)
    file_key = models.CharField(max_length=512, blank=True)
    is_template = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=1)
    version_notes = models.CharField(max_length=255, blank=True, null=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='floor_plans')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['organization', 'status'], name='facilities__organiz_5b0f3e_idx'),
            models.Index(fields=['building', 'floor_label'], name='facilities__buildin_a7c2d1_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.floor_label}, v{self.version})"


class PointOfInterest(models.Model):
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
        ('Maintenance', 'Maintenance'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='points_of_interest')
    name = models.CharField(max_length=120)
    category = models.CharField(max_length=64)
    category_type = models.CharField(max_length=64, blank=True)
    building = models.CharField(max_length=120)
    floor = models.CharField(max_length=32)
    room_number = models.CharField(max_length=32, blank=True)
    description = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    # {"phone", "email", "operatingHours"}; null when no contact field was given
    contact = models.JSONField(null=True, blank=True)
    accessibility = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='Active', db_index=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='points_of_interest')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        indexes = [models.Index(fields=['organization', 'category'], name='facilities__organiz_c41e8b_idx')]

    def __str__(self) -> str:
        return f"{self.name} ({self.building}/{self.floor})"


class Alert(models.Model):
    SEVERITY_HIGH = 'High'
    SEVERITY_CHOICES = [('High', 'High'), ('Medium', 'Medium'), ('Low', 'Low')]

    STATUS_ACTIVE = 'Active'
    STATUS_ACKNOWLEDGED = 'Acknowledged'
    STATUS_RESOLVED = 'Resolved'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_ACKNOWLEDGED, 'Acknowledged'),
        (STATUS_RESOLVED, 'Resolved'),
    ]

    TYPE_CHOICES = [
        ('Unauthorized Entry', 'Unauthorized Entry'),
        ('Low Battery', 'Low Battery'),
        ('Emergency Exit', 'Emergency Exit'),
        ('System Alert', 'System Alert'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='alerts')
    title = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    severity = models.CharField(max_length=8, choices=SEVERITY_CHOICES, default='Medium', db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    alert_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default='System Alert')
    location = models.CharField(max_length=120, blank=True)
    floor = models.CharField(max_length=32, blank=True)
    room = models.CharField(max_length=32, blank=True)
    department = models.CharField(max_length=120, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=32, blank=True)
    zone = models.ForeignKey('GeofenceZone', null=True, blank=True, on_delete=models.SET_NULL, related_name='alerts')
    acknowledged_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='alerts_acknowledged')
    acknowledged_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['organization', 'status', 'created_at'], name='facilities__organiz_9d3a70_idx')]

    def __str__(self) -> str:
        return f"{self.title} [{self.severity}/{self.status}]"


class GeofenceZone(models.Model):
    ALERT_TYPE_CHOICES = [
        ('Restricted', 'Restricted'),
        ('Alert', 'Alert'),
        ('Notification', 'Notification'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='geofence_zones')
    name = models.CharField(max_length=120)
    location = models.CharField(max_length=120, blank=True)
    description = models.TextField(blank=True)
    floor = models.CharField(max_length=32, blank=True)
    alert_type = models.CharField(max_length=16, choices=ALERT_TYPE_CHOICES, default='Notification')
    alert_description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    notify_email = models.BooleanField(default=True)
    notify_sms = models.BooleanField(default=False)
    notify_push = models.BooleanField(default=True)
    notify_sound = models.BooleanField(default=False)
    trigger_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.alert_type})"


class VenueMetricSnapshot(models.Model):
    """Daily venue activity counters shown on the dashboard and in analytics."""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='metric_snapshots')
    active_patients = models.PositiveIntegerField(default=0)
    equipment_tracked = models.PositiveIntegerField(default=0)
    navigation_requests = models.PositiveIntegerField(default=0)
    emergency_alerts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['organization', 'created_at'], name='facilities__organiz_2e61f4_idx')]

    def __str__(self):
        return f"Metrics({self.organization_id}) @ {self.created_at:%F %T}"


class SystemHealthCheck(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='health_checks')
    name = models.CharField(max_length=64)
    health = models.PositiveSmallIntegerField(default=100)
    checked_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('organization', 'name')]
        ordering = ['name']

    def __str__(self):
        return f"{self.name}={self.health}% ({self.organization_id})"


def _report_upload(instance, filename: str) -> str:
    return f"reports/{datetime.date.today():%Y/%m}/{filename}"


class GeneratedReport(models.Model):
    """A data export or report document produced from the analytics pages."""
    KIND_EXPORT = 'export'
    KIND_REPORT = 'report'
    KIND_CHOICES = [(KIND_EXPORT, 'export'), (KIND_REPORT, 'report')]

    organization = models.ForeignKey(Organization, null=True, blank=True, on_delete=models.CASCADE, related_name='reports')
    kind = models.CharField(max_length=8, choices=KIND_CHOICES, default=KIND_REPORT)
    title = models.CharField(max_length=160)
    template = models.CharField(max_length=64, blank=True)
    category = models.CharField(max_length=64, blank=True)
    date_range = models.CharField(max_length=32)
    file_format = models.CharField(max_length=8)
    sections = models.JSONField(default=list, blank=True)
    file = models.FileField(upload_to=_report_upload, max_length=512)
    size = models.PositiveIntegerField(default=0)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='reports')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.title} ({self.file_format})"


class ActivityEvent(models.Model):
    """Audit trail entry; also feeds the recent activity panels."""
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, null=True, blank=True, related_name='activity')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='facilities__action_6f1b2c_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='facilities__object__8e4d59_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}/{self.object_id}"
