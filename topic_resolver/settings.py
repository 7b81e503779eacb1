# settings.py
import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from topic_resolver.enums import Flow
from topic_resolver.errors import ConfigFileError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default.json"

# Template names as they appear under TOPIC_TEMPLATES
FULFIL_TOPIC_TEMPLATE = "FULFIL_TOPIC_TEMPLATE"
GET_TRANSFERS_TOPIC_TEMPLATE = "GET_TRANSFERS_TOPIC_TEMPLATE"
NOTIFICATION_TOPIC_TEMPLATE = "NOTIFICATION_TOPIC_TEMPLATE"
GENERAL_TOPIC_TEMPLATE = "GENERAL_TOPIC_TEMPLATE"


class TopicTemplate(BaseModel):
    """A named topic template and the pattern its rendered names match"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    template: str = Field(..., alias="TEMPLATE")
    regex: Optional[str] = Field(default=None, alias="REGEX")

    def matches(self, topic_name: str) -> bool:
        """Check a rendered topic name against the template's REGEX"""
        if self.regex is None:
            return False
        return re.fullmatch(self.regex, topic_name) is not None


class KafkaActionConfig(BaseModel):
    """Leaf of the config tree: the settings handed to a producer/consumer"""
    model_config = ConfigDict(extra="allow")

    config: Dict[str, Any]


FlowConfig = Dict[str, Dict[str, KafkaActionConfig]]


class KafkaConfig(BaseModel):
    """
    Topic templates plus the flow -> functionality -> action config tree.

    Keys follow the JSON config files (TOPIC_TEMPLATES, PRODUCER, CONSUMER).
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    topic_templates: Dict[str, TopicTemplate] = Field(default_factory=dict, alias="TOPIC_TEMPLATES")
    producer: FlowConfig = Field(default_factory=dict, alias="PRODUCER")
    consumer: FlowConfig = Field(default_factory=dict, alias="CONSUMER")

    def get_template(self, name: str) -> Optional[TopicTemplate]:
        """Get a topic template by name, None if the store has no such template"""
        return self.topic_templates.get(name)

    def get_flow(self, flow: Union[Flow, str]) -> Optional[FlowConfig]:
        """Get the functionality tree for a flow, None for an unknown flow"""
        key = _key(flow)
        if key == Flow.PRODUCER.value:
            return self.producer
        if key == Flow.CONSUMER.value:
            return self.consumer
        return None

    def lookup(
            self,
            flow: Union[Flow, str],
            functionality: str,
            action: str
    ) -> Optional[KafkaActionConfig]:
        """Three-level lookup. Returns None when any level is missing."""
        tree = self.get_flow(flow)
        functionality, action = _key(functionality), _key(action)
        if tree is None or not isinstance(functionality, str) or not isinstance(action, str):
            return None

        actions = tree.get(functionality)
        if actions is None:
            return None
        return actions.get(action)


def _key(value: Any) -> Any:
    return getattr(value, "value", value)


class AppSettings(BaseSettings):
    """Main application settings"""
    # App metadata
    app_name: str = "topic-resolver"
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"

    # Kafka topic templates and producer/consumer config tree
    kafka_config_path: Path = Field(default=DEFAULT_CONFIG_PATH, description="JSON config file")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )


def load_kafka_config(path: Union[str, Path]) -> KafkaConfig:
    """
    Load and validate a Kafka config tree from a JSON file.

    The file may hold the tree itself or a full service config with the
    tree under a top-level "KAFKA" key.

    Raises:
        ConfigFileError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigFileError(f"Kafka config file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"Kafka config file {path} is not valid JSON: {e}") from e

    if isinstance(raw, dict) and "KAFKA" in raw:
        raw = raw["KAFKA"]

    try:
        config = KafkaConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigFileError(f"Invalid Kafka config in {path}: {e}") from e

    logger.info(
        f"Loaded Kafka config from {path}: "
        f"{len(config.topic_templates)} templates, "
        f"producers={sorted(config.producer)}, consumers={sorted(config.consumer)}"
    )
    return config


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get cached singleton settings"""
    return AppSettings()


@lru_cache(maxsize=1)
def get_kafka_config() -> KafkaConfig:
    """Get the cached Kafka config tree named by the settings"""
    return load_kafka_config(get_settings().kafka_config_path)
