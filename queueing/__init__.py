"""Queue sequencing and aggregation for the hospital service screens.

This package contains the models, services, serializers, views and
websocket consumers behind the pharmacy and inspection queues.
"""
