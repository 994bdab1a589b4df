from django.urls import path

from .consumers import OrganizationFormConsumer, PointOfInterestFormConsumer, UpdatesConsumer

websocket_urlpatterns = [
    path("ws/updates/", UpdatesConsumer.as_asgi()),
    path("ws/forms/organization/", OrganizationFormConsumer.as_asgi()),
    path("ws/forms/poi/", PointOfInterestFormConsumer.as_asgi()),
]
