"""Django app configuration for the generation API."""

import atexit

from django.apps import AppConfig


class ApiConfig(AppConfig):
    name = "baassist.web.api"
    label = "api"
    verbose_name = "Business-analyst assistant API"

    def ready(self):
        from baassist.core.config import Config
        from baassist.core.logging import configure_logging
        from baassist.web.api.services import AnalystService

        config = Config.load()
        configure_logging(level=config.log_level, json_output=config.json_logs, log_file=config.log_file)
        atexit.register(AnalystService.shutdown)
