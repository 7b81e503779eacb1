import pytest
from kafka import KafkaConsumer, KafkaProducer

from topic_resolver import client
from topic_resolver.resolver import ResolvedKafkaConfig


class FakeProducer:
    DEFAULT_CONFIG = KafkaProducer.DEFAULT_CONFIG

    def __init__(self, **kwargs):
        self.kwargs = kwargs


class FakeConsumer:
    DEFAULT_CONFIG = KafkaConsumer.DEFAULT_CONFIG

    def __init__(self, *topics, **kwargs):
        self.topics = topics
        self.kwargs = kwargs


@pytest.fixture
def fake_clients(monkeypatch):
    monkeypatch.setattr(client, "KafkaProducer", FakeProducer)
    monkeypatch.setattr(client, "KafkaConsumer", FakeConsumer)


def test_producer_kwargs(resolver):
    resolved = resolver.get_kafka_config("PRODUCER", "TRANSFER", "PREPARE")

    kwargs = client.to_client_kwargs(resolved, KafkaProducer.DEFAULT_CONFIG)

    assert kwargs == {
        "bootstrap_servers": "kafka:9092",
        "client_id": "prod-transfer-prepare",
        "acks": "all",
    }


def test_consumer_kwargs(resolver):
    resolved = resolver.get_kafka_config("CONSUMER", "NOTIFICATION", "EVENT")

    kwargs = client.to_client_kwargs(resolved, KafkaConsumer.DEFAULT_CONFIG)

    assert kwargs == {
        "bootstrap_servers": "kafka:9092",
        "client_id": "con-notification-event",
        "group_id": "group-notification-event",
        "auto_offset_reset": "earliest",
    }


def test_kwargs_without_client_sections():
    resolved = ResolvedKafkaConfig(flow="PRODUCER", functionality="X", action="Y", config={"options": {"sync": True}})

    assert client.to_client_kwargs(resolved, KafkaProducer.DEFAULT_CONFIG) == {}


def test_build_producer(resolver, fake_clients):
    resolved = resolver.get_kafka_config("PRODUCER", "TRANSFER", "PREPARE")

    producer = client.build_producer(resolved, linger_ms=10)

    assert producer.kwargs["bootstrap_servers"] == "kafka:9092"
    assert producer.kwargs["acks"] == "all"
    assert producer.kwargs["linger_ms"] == 10


@pytest.mark.parametrize("acks, expected", [("all", "all"), ("-1", "all"), (-1, "all"), ("1", 1), (0, 0)])
def test_build_producer_normalises_acks(fake_clients, acks, expected):
    resolved = ResolvedKafkaConfig(
        flow="PRODUCER",
        functionality="TRANSFER",
        action="PREPARE",
        config={"topicConf": {"request.required.acks": acks}},
    )

    assert client.build_producer(resolved).kwargs["acks"] == expected


def test_build_consumer(resolver, fake_clients):
    resolved = resolver.get_kafka_config("CONSUMER", "NOTIFICATION", "EVENT")

    consumer = client.build_consumer(resolved, "topic-notification-event", enable_auto_commit=False)

    assert consumer.topics == ("topic-notification-event",)
    assert consumer.kwargs["group_id"] == "group-notification-event"
    assert consumer.kwargs["enable_auto_commit"] is False


@pytest.mark.parametrize("acks", ["-2", "2", -2, 3, True, "leader"])
def test_build_producer_rejects_unsupported_acks(fake_clients, acks):
    resolved = ResolvedKafkaConfig(
        flow="PRODUCER",
        functionality="TRANSFER",
        action="PREPARE",
        config={"topicConf": {"request.required.acks": acks}},
    )

    with pytest.raises(ValueError, match="Unsupported acks value"):
        client.build_producer(resolved)


@pytest.mark.parametrize("codec, expected", [("none", None), ("None", None), ("gzip", "gzip"), ("lz4", "lz4")])
def test_build_producer_normalises_compression(fake_clients, codec, expected):
    resolved = ResolvedKafkaConfig(
        flow="PRODUCER",
        functionality="TRANSFER",
        action="PREPARE",
        config={"rdkafkaConf": {"compression.codec": codec}},
    )

    assert client.build_producer(resolved).kwargs["compression_type"] == expected
