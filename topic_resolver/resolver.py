# resolver.py
# Topic names and producer/consumer config for the transfer services

from __future__ import annotations
import copy
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional, Union

from topic_resolver.enums import Flow
from topic_resolver.errors import ConfigNotFoundError, TemplateRenderError
from topic_resolver.settings import (
    FULFIL_TOPIC_TEMPLATE,
    GENERAL_TOPIC_TEMPLATE,
    GET_TRANSFERS_TOPIC_TEMPLATE,
    NOTIFICATION_TOPIC_TEMPLATE,
    KafkaConfig,
    get_kafka_config as load_default_kafka_config,
    get_settings,
)
from topic_resolver.templates import TemplateRenderer

logger = logging.getLogger(__name__)


# ---------------------------
# Value objects
# ---------------------------

@dataclass(frozen=True)
class GeneralTopicConf:
    """Topic name plus the optional produce-time metadata for a general topic"""
    topic_name: str
    key: Any = None
    partition: Optional[int] = None
    opaque_key: Any = None  # passed along to delivery reports

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topicName": self.topic_name,
            "key": self.key,
            "partition": self.partition,
            "opaqueKey": self.opaque_key,
        }


@dataclass(frozen=True)
class ResolvedKafkaConfig:
    """
    A copy of one config leaf, paired with the logger its client should use.

    The copy is private to the caller; mutating it never touches the tree.
    """
    flow: str
    functionality: str
    action: str
    config: Dict[str, Any] = field(default_factory=dict)
    logger: Any = None

    def as_dict(self) -> Dict[str, Any]:
        """Config dict with the logger stamped in under "logger" """
        return {**self.config, "logger": self.logger}


# ---------------------------
# Resolver
# ---------------------------

class TopicConfigResolver:
    """
    Resolves topic names from templates and producer/consumer config by
    flow, functionality and action.

    Render failures are logged here, once, and re-raised unchanged.
    Config lookups that miss raise ConfigNotFoundError without logging.
    """

    def __init__(
            self,
            config: KafkaConfig,
            renderer: Optional[TemplateRenderer] = None,
            log: Optional[Any] = None
    ):
        """
        Args:
            config: Topic templates and config tree, treated as read-only
            renderer: Template renderer (Mustache by default)
            log: Sink with an error() method; also handed out with every config
        """
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.logger = log or logger

    def _render(self, template_name: str, variables: Optional[Dict[str, Any]] = None) -> str:
        template = self.config.get_template(template_name)
        if template is None:
            raise TemplateRenderError(f"Topic template '{template_name}' is not configured", template_name)
        return self.renderer.render(template.template, variables, name=template_name)

    def _render_logged(self, template_name: str, variables: Optional[Dict[str, Any]] = None) -> str:
        try:
            return self._render(template_name, variables)
        except TemplateRenderError as e:
            self.logger.error(e)
            raise

    def render_fulfil_topic_name(self) -> str:
        """Topic name for transfer fulfil messages"""
        return self._render_logged(FULFIL_TOPIC_TEMPLATE)

    def render_transfer_by_id_topic_name(self) -> str:
        """Topic name for get-transfer-by-id requests"""
        return self._render_logged(GET_TRANSFERS_TOPIC_TEMPLATE)

    def render_notification_topic_name(self) -> str:
        """Topic name for notification events"""
        return self._render_logged(NOTIFICATION_TOPIC_TEMPLATE)

    def get_notification_topic_name(self) -> str:
        """Call-site alias of render_notification_topic_name"""
        return self.render_notification_topic_name()

    def render_general_topic_name(self, functionality: str, action: str) -> str:
        """
        Topic name for a functionality/action pair, e.g. ("transfer", "prepare").

        Values are substituted verbatim. Topic names are conventionally lower
        case while config keys are upper case; callers pass the casing they want.
        """
        return self._render_logged(
            GENERAL_TOPIC_TEMPLATE,
            {"functionality": functionality, "action": action}
        )

    def get_kafka_config(
            self,
            flow: Union[Flow, str],
            functionality: str,
            action: str
    ) -> ResolvedKafkaConfig:
        """
        Get the producer/consumer config for a flow, e.g.
        (Flow.PRODUCER, "TRANSFER", "PREPARE").

        Raises:
            ConfigNotFoundError: If any of the three levels is missing
        """
        leaf = self.config.lookup(flow, functionality, action)
        if leaf is None:
            raise ConfigNotFoundError(flow, functionality, action)

        return ResolvedKafkaConfig(
            flow=getattr(flow, "value", flow),
            functionality=functionality,
            action=action,
            config=copy.deepcopy(leaf.config),
            logger=self.logger,
        )

    def create_general_topic_conf(
            self,
            functionality: str,
            action: str,
            key: Any = None,
            partition: Optional[int] = None,
            opaque_key: Any = None
    ) -> GeneralTopicConf:
        """Build a general topic config; key, partition and opaque_key pass through untouched"""
        return GeneralTopicConf(
            topic_name=self.render_general_topic_name(functionality, action),
            key=key,
            partition=partition,
            opaque_key=opaque_key,
        )


@lru_cache(maxsize=1)
def get_resolver() -> TopicConfigResolver:
    """Get cached resolver over the configured Kafka config file"""
    return TopicConfigResolver(load_default_kafka_config())


# ---------------------------
# Function-style API over the default resolver
# ---------------------------

def get_fulfil_topic_name() -> str:
    return get_resolver().render_fulfil_topic_name()


def get_transfer_by_id_topic_name() -> str:
    return get_resolver().render_transfer_by_id_topic_name()


def get_notification_topic_name() -> str:
    return get_resolver().get_notification_topic_name()


def transform_general_topic_name(functionality: str, action: str) -> str:
    return get_resolver().render_general_topic_name(functionality, action)


def get_kafka_config(flow: Union[Flow, str], functionality: str, action: str) -> ResolvedKafkaConfig:
    return get_resolver().get_kafka_config(flow, functionality, action)


def create_general_topic_conf(
        functionality: str,
        action: str,
        key: Any = None,
        partition: Optional[int] = None,
        opaque_key: Any = None
) -> GeneralTopicConf:
    return get_resolver().create_general_topic_conf(functionality, action, key, partition, opaque_key)


if __name__ == "__main__":
    s = get_settings()
    logging.basicConfig(level=s.log_level)

    print(f"fulfil:        {get_fulfil_topic_name()}")
    print(f"get transfers: {get_transfer_by_id_topic_name()}")
    print(f"notification:  {get_notification_topic_name()}")
    print(f"general:       {create_general_topic_conf('transfer', 'prepare').to_dict()}")

    resolved = get_kafka_config(Flow.PRODUCER, "TRANSFER", "PREPARE")
    print(f"producer config for {resolved.functionality}/{resolved.action}: {resolved.config}")
