from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENDPOINT_PATH_TEMPLATE = "/v1/org/{org_id}/{site_nice_id}"


class ApiConfig(BaseModel):
    """Integration API (probe target) configuration"""

    PROTOCOL: Literal["http", "https"] = Field(..., description="Endpoint protocol")
    HOSTNAME: str = Field(..., min_length=1, description="Endpoint host")
    PORT: int = Field(..., ge=1, le=65535, description="Endpoint port")
    ORG_ID: str = Field(..., min_length=1, description="Organization identifier")
    SITE_NICE_ID: str = Field(..., min_length=1, description="Site nice identifier")
    TOKEN: str = Field(..., min_length=1, repr=False, description="API access token (Bearer)")
    TIMEOUT_SEC: float = Field(default=10.0, gt=0, le=300, description="HTTP client timeout")

    @field_validator("PROTOCOL", mode="before")
    @classmethod
    def _normalize_protocol(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class SmtpConfig(BaseModel):
    """Mail transport configuration"""

    USER: str = Field(..., min_length=1)
    PASSWORD: str = Field(..., min_length=1, repr=False)
    SERVER: str = Field(..., min_length=1)
    PORT: int = Field(..., ge=1, le=65535, description="465 = implicit TLS, otherwise STARTTLS when offered")
    RECIPIENT: str = Field(..., min_length=1)
    SENDER: str | None = Field(default=None, description="From address, defaults to USER")
    TIMEOUT_SEC: float = Field(default=30.0, gt=0, le=300)

    @property
    def from_addr(self) -> str:
        return self.SENDER or self.USER


class LoggingConfig(BaseModel):
    LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    TO_FILE: bool = Field(default=False)
    DIR: str = Field(default="logs")


class MonitorConfig(BaseModel):
    """Process configuration (full)"""

    model_config = ConfigDict(frozen=True)

    API: ApiConfig
    SMTP: SmtpConfig
    CRON_SCHEDULE: str = Field(..., min_length=1, description="Five-field cron expression, UTC")
    CYCLE_DEADLINE_SEC: float = Field(default=15.0, gt=0, le=600, description="Overall deadline per check cycle")
    LOGGING: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def endpoint(self) -> str:
        path = ENDPOINT_PATH_TEMPLATE.format(org_id=self.API.ORG_ID, site_nice_id=self.API.SITE_NICE_ID)
        return f"{self.API.PROTOCOL}://{self.API.HOSTNAME}:{self.API.PORT}{path}"
