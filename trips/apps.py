from django.apps import AppConfig


class TripsConfig(AppConfig):
    """Storage for driver trip offers and per-organization matching config."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "trips"
    label = "trips"
    verbose_name = "Driver trips"
