from django.urls import path

from .consumers import AnalyticsConsumer, QueueUpdatesConsumer

websocket_urlpatterns = [
    path("ws/queue/<str:family>/<str:service_date>/", QueueUpdatesConsumer.as_asgi()),
    path("ws/queue/<str:family>/<str:service_date>/<str:type_code>/", QueueUpdatesConsumer.as_asgi()),
    path("ws/analytics/", AnalyticsConsumer.as_asgi()),
]
