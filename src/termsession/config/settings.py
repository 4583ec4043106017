"""Settings for termsession.

Values come from a YAML file, then ``.env``, then ``TERMSESSION_*``
environment variables, with ``__`` separating nested keys::

    TERMSESSION_SESSION__WARN_LIMIT=500
    TERMSESSION_METRICS__NARROW_WIDTH=7.5
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termsession.yaml")


class MetricsConfig(BaseModel):
    narrow_width: float = Field(default=8.0, gt=0, description="Pixel width of a single-byte character")
    wide_width: float = Field(default=13.0, gt=0, description="Pixel width of a multi-byte character")
    line_height: float = Field(default=20.0, gt=0)
    prompt_width: float = Field(default=0.0, ge=0)
    content_padding: float = Field(default=40.0, ge=0)
    screen_width: float = Field(default=700.0, gt=0)
    screen_height: float = Field(default=500.0, gt=0)


class SessionConfig(BaseModel):
    context: str = Field(default="/termsession", description="Prefix shown before echoed commands")
    warn_limit: int = Field(default=200, ge=0, description="Log size that triggers the overflow warning")
    auto_help: bool = Field(default=True)
    initial_log: list[str] = Field(
        default_factory=lambda: [
            "Terminal Initializing ...",
            "Welcome! Type <span class='t-cmd-key'>help</span> to list the available commands.",
        ]
    )


class ShellConfig(BaseModel):
    enabled: bool = Field(default=False, description="Run external commands through the system shell")
    executable: str | None = Field(default=None)
    timeout: float | None = Field(default=30.0, gt=0)


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8765, ge=1, le=65535)
    base_url: str = Field(default="http://127.0.0.1:8765")
    timeout: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root termsession configuration, one section per concern."""

    model_config = {
        "env_prefix": "TERMSESSION_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment beats the YAML values passed in as init kwargs
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Build Settings from a YAML file plus environment overrides.

    A missing file is not an error: defaults and environment variables
    still apply.

    Raises:
        ValueError: If the YAML document is not a mapping.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.is_file():
        logger.warning("No config file at %s; using defaults and environment", path)
        return Settings()

    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(document).__name__}")
    logger.info("Read settings from %s", path)
    return Settings(**document)
