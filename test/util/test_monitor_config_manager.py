import pytest

from site_monitor.exception import ConfigError
from site_monitor.util.config_manager import REQUIRED_ENV, ConfigManager


@pytest.fixture
def full_env() -> dict[str, str]:
    return {
        "PANGOLIN_INT_API_PROTOCOL": "https",
        "PANGOLIN_INT_API_HOSTNAME": "pangolin.example.com",
        "PANGOLIN_INT_API_PORT": "3003",
        "PANGOLIN_ORG_ID": "acme",
        "PANGOLIN_SITE_NICE_ID": "home-lab",
        "PANGOLIN_API_TOKEN": "secret-token",
        "CRON_SCHEDULE": "*/5 * * * *",
        "SMTP_USER": "monitor@example.com",
        "SMTP_PASSWORD": "app-password",
        "SMTP_SERVER": "smtp.example.com",
        "SMTP_PORT": "587",
        "RECIPIENT_EMAIL": "ops@example.com",
    }


class TestLoadMonitorConfig:

    def test_when_all_required_env_present_then_config_loaded(self, full_env):
        # Act
        config = ConfigManager.load_monitor_config(environ=full_env)

        # Assert
        assert config.endpoint == "https://pangolin.example.com:3003/v1/org/acme/home-lab"
        assert config.SMTP.PORT == 587
        assert config.SMTP.from_addr == "monitor@example.com"
        assert config.CRON_SCHEDULE == "*/5 * * * *"
        assert config.CYCLE_DEADLINE_SEC == 15.0
        assert config.API.TIMEOUT_SEC == 10.0

    def test_when_several_missing_then_all_are_reported(self, full_env):
        """Every missing parameter is listed, not just the first"""
        # Arrange
        del full_env["PANGOLIN_ORG_ID"]
        del full_env["SMTP_PASSWORD"]
        full_env["RECIPIENT_EMAIL"] = "   "

        # Act
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager.load_monitor_config(environ=full_env)

        # Assert
        assert exc_info.value.problems == ["PANGOLIN_ORG_ID", "SMTP_PASSWORD", "RECIPIENT_EMAIL"]
        assert "missing required env: PANGOLIN_ORG_ID, SMTP_PASSWORD, RECIPIENT_EMAIL" in str(exc_info.value)

    def test_when_environment_empty_then_every_required_name_reported(self):
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager.load_monitor_config(environ={})

        assert exc_info.value.problems == list(REQUIRED_ENV)

    def test_when_values_padded_then_stripped(self, full_env):
        full_env["PANGOLIN_INT_API_HOSTNAME"] = "  pangolin.example.com \n"

        config = ConfigManager.load_monitor_config(environ=full_env)

        assert config.API.HOSTNAME == "pangolin.example.com"

    def test_when_port_invalid_then_config_error_names_variable(self, full_env):
        full_env["SMTP_PORT"] = "not-a-port"
        full_env["PANGOLIN_INT_API_PORT"] = "70000"

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager.load_monitor_config(environ=full_env)

        problems = " ".join(exc_info.value.problems)
        assert "SMTP_PORT" in problems
        assert "PANGOLIN_INT_API_PORT" in problems

    def test_when_optional_settings_given_then_applied(self, full_env):
        full_env.update(
            {
                "EMAIL_FROM": "alerts@example.com",
                "PROBE_TIMEOUT_SEC": "5",
                "CYCLE_DEADLINE_SEC": "8",
                "LOG_LEVEL": "DEBUG",
                "PANGOLIN_INT_API_PROTOCOL": "HTTP",
            }
        )

        config = ConfigManager.load_monitor_config(environ=full_env)

        assert config.SMTP.from_addr == "alerts@example.com"
        assert config.API.TIMEOUT_SEC == 5.0
        assert config.CYCLE_DEADLINE_SEC == 8.0
        assert config.LOGGING.LEVEL == "DEBUG"
        assert config.endpoint.startswith("http://")

    def test_token_is_not_in_repr(self, full_env):
        config = ConfigManager.load_monitor_config(environ=full_env)

        assert "secret-token" not in repr(config)
        assert "app-password" not in repr(config)


class TestYamlConfigFile:

    def test_when_yaml_file_then_values_and_placeholders_resolved(self, tmp_path, full_env):
        # Arrange
        config_file = tmp_path / "monitor.yml"
        config_file.write_text(
            "PANGOLIN_ORG_ID: from-file\n"
            "SMTP_PORT: 465\n"
            "PANGOLIN_API_TOKEN: ${MY_TOKEN}\n"
            "SMTP_SERVER: ${MISSING_VAR:-mail.example.com}\n",
            encoding="utf-8",
        )
        from_file = {"PANGOLIN_ORG_ID", "SMTP_PORT", "PANGOLIN_API_TOKEN", "SMTP_SERVER"}
        environ = {key: value for key, value in full_env.items() if key not in from_file}
        environ["MY_TOKEN"] = "token-from-env"

        # Act
        config = ConfigManager.load_monitor_config(config_path=str(config_file), environ=environ)

        # Assert
        assert config.API.ORG_ID == "from-file"
        assert config.SMTP.PORT == 465
        assert config.API.TOKEN == "token-from-env"
        assert config.SMTP.SERVER == "mail.example.com"

    def test_when_env_and_file_both_set_then_env_wins(self, tmp_path, full_env):
        config_file = tmp_path / "monitor.yml"
        config_file.write_text("PANGOLIN_ORG_ID: from-file\n", encoding="utf-8")

        config = ConfigManager.load_monitor_config(config_path=str(config_file), environ=full_env)

        assert config.API.ORG_ID == "acme"

    def test_when_placeholder_unresolved_then_reported_missing(self, tmp_path, full_env):
        config_file = tmp_path / "monitor.yml"
        config_file.write_text("PANGOLIN_API_TOKEN: ${NOT_SET_ANYWHERE}\n", encoding="utf-8")
        del full_env["PANGOLIN_API_TOKEN"]

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager.load_monitor_config(config_path=str(config_file), environ=full_env)

        assert exc_info.value.problems == ["PANGOLIN_API_TOKEN"]

    def test_when_file_missing_then_config_error(self, tmp_path, full_env):
        with pytest.raises(ConfigError):
            ConfigManager.load_monitor_config(config_path=str(tmp_path / "nope.yml"), environ=full_env)
