"""Application configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The Mailgun API key doubles as the webhook signing key, so a single
    value both verifies inbound requests and authenticates outbound ones.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app_name: str = "mailrelay"
    app_version: str = "0.1.0"
    debug: bool = False
    listen_address: str = "0.0.0.0:8000"

    # Mailgun settings (required)
    mailgun_api_key: str
    mailgun_domain: str
    mailgun_from: str
    mailgun_api_base_url: str = "https://api.mailgun.net/v3"

    # Slack settings
    slack_api_token: str
    slack_api_base_url: str = "https://slack.com/api"

    @field_validator("listen_address")
    @classmethod
    def validate_listen_address(cls, value: str) -> str:
        """Require a host:port pair with a numeric port."""
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"listen_address must be host:port, got {value!r}")
        return value

    @property
    def listen_host(self) -> str:
        """Host part of listen_address (IPv6 brackets removed)."""
        return self.listen_address.rpartition(":")[0].strip("[]")

    @property
    def listen_port(self) -> int:
        """Port part of listen_address."""
        return int(self.listen_address.rpartition(":")[2])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
