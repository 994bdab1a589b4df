from django.core.management.base import BaseCommand
from django.utils import timezone
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from facilities.models import Organization
from facilities.services.dashboard import refresh_dashboard


class Command(BaseCommand):
    help = "Rewarm dashboard caches; broadcast WebSocket refresh event."

    def add_arguments(self, parser):
        parser.add_argument('--organization', help='Only refresh this organization id')

    def handle(self, *args, **options):
        now = timezone.now()
        organizations = Organization.objects.filter(is_active=True)
        if options.get('organization'):
            organizations = organizations.filter(id=options['organization'])

        keys_refreshed = [refresh_dashboard(org) for org in organizations]

        channel_layer = get_channel_layer()
        if channel_layer is not None:
            event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(),
                     "keys": keys_refreshed[:50]}
            async_to_sync(channel_layer.group_send)("updates", event)

        self.stdout.write(self.style.SUCCESS(f"Refreshed {len(keys_refreshed)} keys at {now}"))
