"""Django app configuration for django-offerings."""

from django.apps import AppConfig


class DjangoOfferingsConfig(AppConfig):
    """Configuration for django-offerings app."""

    name = "django_offerings"
    verbose_name = "Offerings"
    default_auto_field = "django.db.models.BigAutoField"
