import os
import re
from collections.abc import Mapping

import yaml
from pydantic import ValidationError

from site_monitor.exception import ConfigError
from site_monitor.schema.monitor_config_schema import MonitorConfig

# Environment variable -> (section, field) in MonitorConfig. Section None means top-level.
REQUIRED_ENV: dict[str, tuple[str | None, str]] = {
    "PANGOLIN_INT_API_PROTOCOL": ("API", "PROTOCOL"),
    "PANGOLIN_INT_API_HOSTNAME": ("API", "HOSTNAME"),
    "PANGOLIN_INT_API_PORT": ("API", "PORT"),
    "PANGOLIN_ORG_ID": ("API", "ORG_ID"),
    "PANGOLIN_SITE_NICE_ID": ("API", "SITE_NICE_ID"),
    "PANGOLIN_API_TOKEN": ("API", "TOKEN"),
    "CRON_SCHEDULE": (None, "CRON_SCHEDULE"),
    "SMTP_USER": ("SMTP", "USER"),
    "SMTP_PASSWORD": ("SMTP", "PASSWORD"),
    "SMTP_SERVER": ("SMTP", "SERVER"),
    "SMTP_PORT": ("SMTP", "PORT"),
    "RECIPIENT_EMAIL": ("SMTP", "RECIPIENT"),
}

OPTIONAL_ENV: dict[str, tuple[str | None, str]] = {
    "EMAIL_FROM": ("SMTP", "SENDER"),
    "SMTP_TIMEOUT_SEC": ("SMTP", "TIMEOUT_SEC"),
    "PROBE_TIMEOUT_SEC": ("API", "TIMEOUT_SEC"),
    "CYCLE_DEADLINE_SEC": (None, "CYCLE_DEADLINE_SEC"),
    "LOG_LEVEL": ("LOGGING", "LEVEL"),
    "LOG_TO_FILE": ("LOGGING", "TO_FILE"),
    "LOG_DIR": ("LOGGING", "DIR"),
}


class ConfigManager:

    @staticmethod
    def load_yaml_file(path: str) -> dict:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def expand_env_placeholder(value: str, environ: Mapping[str, str] | None = None) -> str | None:
        environ = os.environ if environ is None else environ
        match = re.fullmatch(r"\$\{(\w+)(?::-([^\}]*))?\}", value.strip())  # Match ${VAR_NAME:-default} or ${VAR_NAME}
        if not match:
            return value

        var_name = match.group(1)
        default_value = match.group(2)

        return environ.get(var_name) or default_value

    @staticmethod
    def collect_settings(config_path: str | None = None, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        """
        Merge settings from the optional YAML file and the environment.
        Environment wins; blank values are treated as unset.
        """
        environ = os.environ if environ is None else environ
        settings: dict[str, str] = {}

        if config_path:
            try:
                raw: dict = ConfigManager.load_yaml_file(config_path)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"cannot read config file {config_path}: {e}") from e
            if not isinstance(raw, dict):
                raise ConfigError(f"config file {config_path} must contain a mapping")
            for key, value in raw.items():
                if value is None:
                    continue
                if isinstance(value, str):
                    value = ConfigManager.expand_env_placeholder(value, environ)
                    if value is None:
                        continue
                if isinstance(value, bool):
                    value = str(value).lower()
                settings[str(key)] = str(value).strip()

        for key in (*REQUIRED_ENV, *OPTIONAL_ENV):
            env_value = environ.get(key)
            if env_value is not None and env_value.strip():
                settings[key] = env_value.strip()

        return {key: value for key, value in settings.items() if value}

    @staticmethod
    def load_monitor_config(config_path: str | None = None, environ: Mapping[str, str] | None = None) -> MonitorConfig:
        """Load and validate process configuration, reporting every problem at once."""
        settings: dict[str, str] = ConfigManager.collect_settings(config_path, environ)

        missing: list[str] = [name for name in REQUIRED_ENV if name not in settings]
        if missing:
            raise ConfigError(f"missing required env: {', '.join(missing)}", problems=missing)

        raw: dict = {"API": {}, "SMTP": {}, "LOGGING": {}}
        for name, (section, field) in (*REQUIRED_ENV.items(), *OPTIONAL_ENV.items()):
            if name not in settings:
                continue
            if section is None:
                raw[field] = settings[name]
            else:
                raw[section][field] = settings[name]

        try:
            return MonitorConfig(**raw)
        except ValidationError as e:
            problems: list[str] = [ConfigManager._describe_error(err) for err in e.errors()]
            raise ConfigError(f"invalid configuration: {'; '.join(problems)}", problems=problems) from e

    @staticmethod
    def _describe_error(error: dict) -> str:
        loc = tuple(str(part) for part in error.get("loc", ()))
        for name, (section, field) in (*REQUIRED_ENV.items(), *OPTIONAL_ENV.items()):
            if loc == ((section, field) if section else (field,)):
                return f"{name}: {error.get('msg')}"
        return f"{'.'.join(loc)}: {error.get('msg')}"

