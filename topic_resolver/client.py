# client.py – Build kafka-python clients from resolved topic config
import logging
from typing import Any, Dict, Mapping

from kafka import KafkaConsumer, KafkaProducer

from topic_resolver.resolver import ResolvedKafkaConfig

logger = logging.getLogger(__name__)

# librdkafka names that do not map to kafka-python by swapping "." for "_"
KEY_ALIASES: Dict[str, str] = {
    "metadata.broker.list": "bootstrap_servers",
    "bootstrap.servers": "bootstrap_servers",
    "request.required.acks": "acks",
    "queue.buffering.max.ms": "linger_ms",
    "compression.codec": "compression_type",
}

# Sections of a config leaf that carry client settings
CLIENT_SECTIONS = ("rdkafkaConf", "topicConf")


def to_client_kwargs(
        resolved: ResolvedKafkaConfig,
        accepted: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Translate a resolved config leaf into kafka-python keyword arguments.

    Args:
        resolved: Config returned by TopicConfigResolver.get_kafka_config
        accepted: The target client's DEFAULT_CONFIG; other keys are dropped

    Returns:
        Keyword arguments for KafkaProducer/KafkaConsumer
    """
    cfg: Dict[str, Any] = {}
    dropped = []

    for section in CLIENT_SECTIONS:
        for key, value in (resolved.config.get(section) or {}).items():
            name = KEY_ALIASES.get(key, key.replace(".", "_"))
            if name in accepted:
                cfg[name] = value
            else:
                dropped.append(key)

    if dropped:
        logger.debug(
            f"Ignoring settings without a kafka-python equivalent for "
            f"{resolved.flow}/{resolved.functionality}/{resolved.action}: {sorted(dropped)}"
        )
    return cfg


def _normalise_acks(acks: Any) -> Any:
    # kafka-python accepts 0, 1 or "all"; librdkafka spells "all" as -1
    if acks in ("all", "-1", -1):
        return "all"
    if acks in ("0", "1", 0, 1) and not isinstance(acks, bool):
        return int(acks)
    raise ValueError(f"Unsupported acks value {acks!r}, expected one of 0, 1, -1 or 'all'")


def _normalise_compression(codec: Any) -> Any:
    # librdkafka uses "none"; kafka-python wants None
    if isinstance(codec, str) and codec.lower() == "none":
        return None
    return codec


def build_producer(resolved: ResolvedKafkaConfig, **overrides: Any) -> KafkaProducer:
    """
    Build a KafkaProducer from a PRODUCER config leaf.

    Args:
        resolved: Resolved producer config
        **overrides: kafka-python parameters applied last (serializers etc.)

    Raises:
        ValueError: If acks is not one of 0, 1, -1 or "all"
    """
    cfg = to_client_kwargs(resolved, KafkaProducer.DEFAULT_CONFIG)
    if "acks" in cfg:
        cfg["acks"] = _normalise_acks(cfg["acks"])
    if "compression_type" in cfg:
        cfg["compression_type"] = _normalise_compression(cfg["compression_type"])
    cfg.update(overrides)

    logger.info(
        f"Building producer for {resolved.functionality}/{resolved.action}: "
        f"bootstrap={cfg.get('bootstrap_servers')}, client_id={cfg.get('client_id')}"
    )
    return KafkaProducer(**cfg)


def build_consumer(resolved: ResolvedKafkaConfig, *topics: str, **overrides: Any) -> KafkaConsumer:
    """
    Build a KafkaConsumer from a CONSUMER config leaf.

    Args:
        resolved: Resolved consumer config
        *topics: Topics to subscribe to
        **overrides: kafka-python parameters applied last
    """
    cfg = to_client_kwargs(resolved, KafkaConsumer.DEFAULT_CONFIG)
    cfg.update(overrides)

    logger.info(
        f"Building consumer for {resolved.functionality}/{resolved.action}: "
        f"group={cfg.get('group_id')}, servers={cfg.get('bootstrap_servers')}, topics={list(topics)}"
    )
    return KafkaConsumer(*topics, **cfg)
