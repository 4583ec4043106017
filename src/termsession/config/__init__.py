"""Settings for termsession: YAML file, ``.env`` and ``TERMSESSION_*`` variables."""

from termsession.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
