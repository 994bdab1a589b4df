"""
Management command to populate the database with demo data.

Idempotent: records are looked up by name first, so running it twice does
not duplicate organizations, buildings or users.
"""
import random
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand
from django.utils import timezone

from facilities.models import (
    Alert,
    Building,
    FloorPlan,
    GeofenceZone,
    Organization,
    PointOfInterest,
    SystemHealthCheck,
    User,
    VenueMetricSnapshot,
    VenueTemplate,
)
from facilities.services.audit import log_action
from facilities.services.floor_plans import parse_floor_number

DEMO_PASSWORD = '123456'

PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="400" height="300">'
    '<rect x="10" y="10" width="380" height="280" fill="none" stroke="#333"/>'
    '<text x="200" y="150" text-anchor="middle">{title}</text></svg>'
)


class Command(BaseCommand):
    help = 'Populate database with demo organizations, maps, points of interest and alerts'

    def add_arguments(self, parser):
        parser.add_argument('--seed', type=int, default=42, help='Random seed for metric values')

    def handle(self, *args, **options):
        random.seed(options['seed'])
        self.stdout.write('Creating demo data...')

        templates = self.create_templates()
        organizations = self.create_organizations(templates)
        users = self.create_users(organizations)
        for org in organizations:
            buildings = self.create_buildings(org)
            self.create_floor_plans(org, buildings, users['super'])
            self.create_pois(org, buildings, users['super'])
            zones = self.create_zones(org)
            self.create_alerts(org, zones)
            self.create_snapshots(org)
            self.create_health_checks(org)

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_templates(self):
        data = [
            ('Hospital Standard', 'Hospital', 'Departments, wards and emergency routing.'),
            ('Airport Terminal', 'Airport', 'Gates, check-in counters and security lanes.'),
            ('Shopping Mall', 'Shopping Mall', 'Stores, food court and parking levels.'),
        ]
        templates = []
        for name, venue_type, description in data:
            template, _ = VenueTemplate.objects.get_or_create(
                name=name, defaults={'venue_type': venue_type, 'description': description,
                                     'config': {'defaultFloors': 5}})
            templates.append(template)
            self.stdout.write(f'Template: {template.name}')
        return templates

    def create_organizations(self, templates):
        data = [
            ('City General Hospital', 'Hospital', 'United States', 'Boston', 'America/New_York', templates[0]),
            ('Northside Medical Center', 'Hospital', 'Canada', 'Toronto', 'America/Toronto', templates[0]),
            ('Harbor International Airport', 'Airport', 'United Kingdom', 'London', 'Europe/London', templates[1]),
            ('Riverside Mall', 'Shopping Mall', 'Germany', 'Berlin', 'Europe/Berlin', templates[2]),
        ]
        organizations = []
        for name, org_type, country, city, tz, template in data:
            slug = name.lower().replace(' ', '')
            org, created = Organization.objects.get_or_create(
                name=name,
                defaults={
                    'organization_type': org_type,
                    'email': f'info@{slug}.example.com',
                    'phone': '+1 555 0100',
                    'country': country,
                    'city': city,
                    'timezone': tz,
                    'address': '1 Main Street',
                    'venue_template': template,
                },
            )
            if created:
                log_action(user=None, action='created', organization=org, object_type='organization',
                           object_id=org.id, detail={'name': org.name})
            organizations.append(org)
            self.stdout.write(f'Organization: {org.name}')
        return organizations

    def create_users(self, organizations):
        data = [
            ('super', 'super', None, 'Sam', 'Super'),
            ('admin1', 'admin', organizations[0], 'Alice', 'Admin'),
            ('staff1', 'staff', organizations[0], 'Sean', 'Staff'),
        ]
        users = {}
        for username, role, org, first, last in data:
            user, _ = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f'{username}@facilityhub.example.com',
                    'password': make_password(DEMO_PASSWORD),
                    'role': role,
                    'organization': org,
                    'first_name': first,
                    'last_name': last,
                },
            )
            users[username] = user
            self.stdout.write(f'User: {user.username} ({user.role})')
        return users

    def create_buildings(self, org):
        buildings = []
        for name, floors in (('Main Building', 5), ('North Wing', 3)):
            building, _ = Building.objects.get_or_create(organization=org, name=name, defaults={'floors': floors})
            buildings.append(building)
        return buildings

    def create_floor_plans(self, org, buildings, user):
        statuses = [FloorPlan.STATUS_PUBLISHED, FloorPlan.STATUS_DRAFT, FloorPlan.STATUS_PUBLISHED]
        for building in buildings:
            for label, status in zip(('Ground', '1', '2'), statuses):
                title = f'{building.name} - Floor {label}'
                if FloorPlan.objects.filter(organization=org, title=title).exists():
                    continue
                plan = FloorPlan(
                    organization=org, building=building, title=title, floor_label=label,
                    floor_number=parse_floor_number(label), status=status, scale='1:100',
                    tags=['demo', building.name.split()[0].lower()], created_by=user,
                    published_at=timezone.now() if status == FloorPlan.STATUS_PUBLISHED else None,
                )
                plan.file.save(f'{label}.svg', ContentFile(PLACEHOLDER_SVG.format(title=title).encode()), save=False)
                plan.file_key = plan.file.name
                plan.save()

    def create_pois(self, org, buildings, user):
        data = [
            ('Main Reception', 'Reception', 'Ground'),
            ('Pharmacy', 'Pharmacy', '1'),
            ('Cafeteria', 'Cafeteria', 'Ground'),
            ('Information Desk', 'Information Desk', '2'),
        ]
        for name, category, floor in data:
            PointOfInterest.objects.get_or_create(
                organization=org, name=name,
                defaults={
                    'category': category,
                    'building': buildings[0].name,
                    'floor': floor,
                    'tags': ['demo'],
                    'accessibility': {'wheelchairAccessible': True, 'hearingLoop': False,
                                      'visualAidSupport': False},
                    'latitude': round(random.uniform(-60, 60), 5),
                    'longitude': round(random.uniform(-120, 120), 5),
                    'created_by': user,
                },
            )

    def create_zones(self, org):
        data = [
            ('Pharmacy Storage', 'Restricted', 'Staff only area'),
            ('Main Exit', 'Alert', 'Emergency exit monitoring'),
            ('Lobby', 'Notification', 'Visitor arrivals'),
        ]
        zones = []
        for name, alert_type, description in data:
            zone, _ = GeofenceZone.objects.get_or_create(
                organization=org, name=name,
                defaults={'alert_type': alert_type, 'description': description, 'floor': 'Ground'})
            zones.append(zone)
        return zones

    def create_alerts(self, org, zones):
        if Alert.objects.filter(organization=org).exists():
            return
        data = [
            ('Unauthorized entry', 'Unauthorized Entry', 'High', Alert.STATUS_ACTIVE, zones[0]),
            ('Tag battery low', 'Low Battery', 'Low', Alert.STATUS_ACKNOWLEDGED, None),
            ('Exit door opened', 'Emergency Exit', 'Medium', Alert.STATUS_RESOLVED, zones[1]),
        ]
        for title, alert_type, severity, status, zone in data:
            Alert.objects.create(organization=org, title=title, alert_type=alert_type, severity=severity,
                                 status=status, zone=zone, location=zone.name if zone else 'Ward 3')
            if zone is not None:
                zone.trigger_count += 1
                zone.save(update_fields=['trigger_count'])

    def create_snapshots(self, org):
        if VenueMetricSnapshot.objects.filter(organization=org).exists():
            return
        now = timezone.now()
        for days_ago in range(30, -1, -1):
            snapshot = VenueMetricSnapshot.objects.create(
                organization=org,
                active_patients=random.randint(800, 1500),
                equipment_tracked=random.randint(2000, 3500),
                navigation_requests=random.randint(5000, 9000),
                emergency_alerts=random.randint(0, 8),
            )
            VenueMetricSnapshot.objects.filter(id=snapshot.id).update(created_at=now - timedelta(days=days_ago))

    def create_health_checks(self, org):
        for name in ('Navigation System', 'Asset Tracking', 'Alert Gateway', 'Map Service'):
            SystemHealthCheck.objects.get_or_create(organization=org, name=name,
                                                    defaults={'health': random.randint(65, 100)})
