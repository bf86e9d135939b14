"""Tests for configuration."""

import os

import pytest

from aws_playground.config import (
    AWSConfig,
    PublishConfig,
    SendRawEmailConfig,
    SubscribeConfig,
    TracingConfig,
    load_env,
)
from aws_playground.errors import ConfigError
from aws_playground.log import TraceLogLevel


class TestValidate:
    def test_send_raw_email_requires_body(self):
        with pytest.raises(ConfigError, match="--body must be specified"):
            SendRawEmailConfig(from_address="a@b.test").validate()

    def test_send_raw_email_requires_from(self):
        with pytest.raises(ConfigError, match="--from must be specified"):
            SendRawEmailConfig(body="body.txt").validate()

    def test_publish_requires_topic(self):
        with pytest.raises(ConfigError, match="--topic must be specified"):
            PublishConfig(message="hi").validate()

    def test_subscribe_requires_queue_url(self):
        with pytest.raises(ConfigError, match="--queue-url must be specified"):
            SubscribeConfig().validate()

    @pytest.mark.parametrize("wait", [-1, 21])
    def test_subscribe_wait_time_range(self, wait):
        with pytest.raises(ConfigError, match="--wait-time-seconds"):
            SubscribeConfig(queue_url="https://q", wait_time_s=wait).validate()

    def test_subscribe_max_messages_range(self):
        with pytest.raises(ConfigError):
            SubscribeConfig(queue_url="https://q", max_messages=11).validate()

    def test_valid_configs(self):
        SendRawEmailConfig(body="b", from_address="a@b.test").validate()
        PublishConfig(topic="arn:aws:sns:us-east-1:000000000000:t").validate()
        SubscribeConfig(queue_url="https://q", wait_time_s=20).validate()


class TestAWSConfig:
    def test_from_env(self):
        config = AWSConfig.from_env(
            {"AWS_REGION": "ap-northeast-1", "AWS_ENDPOINT_URL": "http://localhost:4566"}
        )

        assert config.region == "ap-northeast-1"
        assert config.endpoint_url == "http://localhost:4566"

    def test_empty_values_are_none(self):
        config = AWSConfig.from_env({"AWS_REGION": ""})

        assert config.region is None
        assert config.endpoint_url is None


class TestTracingConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)

        config = TracingConfig()

        assert config.enabled is True
        assert config.log_level is TraceLogLevel.ERROR
        assert config.fix_log_level is TraceLogLevel.INFO
        assert config.otlp_endpoint is None

    def test_otlp_endpoint_from_env(self, monkeypatch):
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4318")

        assert TracingConfig().otlp_endpoint == "http://collector:4318"


class TestLoadEnv:
    def test_missing_file_is_not_an_error(self, tmp_path):
        assert load_env(str(tmp_path / "missing.env")) is False

    def test_does_not_override_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("AWS_REGION=from-file\nPLAYGROUND_ONLY_IN_FILE=yes\n")
        monkeypatch.setenv("AWS_REGION", "from-env")
        monkeypatch.delenv("PLAYGROUND_ONLY_IN_FILE", raising=False)

        load_env(str(env_file))

        assert os.environ["AWS_REGION"] == "from-env"
        assert os.environ["PLAYGROUND_ONLY_IN_FILE"] == "yes"
        monkeypatch.delenv("PLAYGROUND_ONLY_IN_FILE")
