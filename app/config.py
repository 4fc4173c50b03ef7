from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    otel_exporter_otlp_endpoint: str = Field(default="http://localhost:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT")
    otel_exporter_otlp_insecure: bool = Field(default=True, alias="OTEL_EXPORTER_OTLP_INSECURE")
    otel_service_name: str = Field(default="hello-trace-logging", alias="OTEL_SERVICE_NAME")
    otel_resource_attributes: str = Field(
        default="service.version=1.0,deployment.environment=dev",
        alias="OTEL_RESOURCE_ATTRIBUTES",
    )

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def resource_attributes(self) -> dict[str, str]:
        """Parse ``key=value,key=value`` into a dict (blank entries are skipped)."""

        attributes: dict[str, str] = {}
        for entry in self.otel_resource_attributes.split(","):
            entry = entry.strip()
            if not entry:
                continue
            key, sep, value = entry.partition("=")
            key = key.strip()
            if not sep or not key:
                raise ValueError(f"Invalid resource attribute: {entry!r}")
            attributes[key] = value.strip()
        return attributes


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
