from django.apps import AppConfig  # type: ignore


class EquipmentConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.equipment"
    verbose_name = "Equipment"
