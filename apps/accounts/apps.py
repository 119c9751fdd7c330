from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.accounts'
    verbose_name = 'الحسابات'

    def ready(self):
        """تسجيل Django Signals عند جاهزية التطبيق"""
        import apps.accounts.signals  # noqa: F401
