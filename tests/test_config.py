import pytest

from app.config import Settings, get_settings


def test_settings_read_environment() -> None:
    settings = get_settings()
    assert settings.otel_service_name == "hello-test"
    assert settings.otel_exporter_otlp_endpoint == "http://collector.test:4317"
    assert settings.port == 8080
    assert settings.host == "0.0.0.0"


def test_resource_attributes_are_parsed() -> None:
    settings = Settings(OTEL_RESOURCE_ATTRIBUTES=" service.version = 1.0 ,, deployment.environment=dev,")
    assert settings.resource_attributes == {
        "service.version": "1.0",
        "deployment.environment": "dev",
    }


def test_resource_attribute_value_may_contain_equals() -> None:
    settings = Settings(OTEL_RESOURCE_ATTRIBUTES="build.flags=a=b")
    assert settings.resource_attributes == {"build.flags": "a=b"}


@pytest.mark.parametrize("raw", ["no-separator", "=value"])
def test_malformed_resource_attributes_raise(raw: str) -> None:
    with pytest.raises(ValueError):
        _ = Settings(OTEL_RESOURCE_ATTRIBUTES=raw).resource_attributes
