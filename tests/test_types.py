import datetime

import pytest

from spout2gelf.types import ContainerInfo, LogRecord, parse_time


class TestParseTime:
    def test_zulu(self):
        dt = parse_time("2017-07-14T02:40:00.123456Z")
        assert dt == datetime.datetime(
            2017, 7, 14, 2, 40, 0, 123456, tzinfo=datetime.timezone.utc
        )

    def test_nanoseconds_are_truncated(self):
        dt = parse_time("2017-07-14T02:40:00.123456789Z")
        assert dt.microsecond == 123456

    def test_offset_is_kept(self):
        dt = parse_time("2017-07-14T04:40:00+02:00")
        assert dt.utcoffset() == datetime.timedelta(hours=2)

    def test_empty(self):
        assert parse_time("") is None
        assert parse_time(None) is None


class TestLogRecordFromDict:
    def test_full_document(self):
        record = LogRecord.from_dict(
            {
                "source": "stderr",
                "data": "boom",
                "time": "2017-07-14T02:40:00.123456Z",
                "container": {
                    "id": "3f2a9c",
                    "name": "/web-1",
                    "image": "sha256:abcdef",
                    "created": "2017-07-01T12:00:00Z",
                    "config": {
                        "image": "nginx:1.13",
                        "cmd": ["nginx", "-g", "daemon off;"],
                        "labels": {"gelf_team": "core"},
                    },
                    "node": {"name": "swarm-1"},
                },
            }
        )

        assert record.source == "stderr"
        assert record.data == "boom"
        assert record.container.name == "/web-1"
        assert record.container.cmd == ("nginx", "-g", "daemon off;")
        assert record.container.labels == {"gelf_team": "core"}
        assert record.container.node.name == "swarm-1"
        assert record.container.created.year == 2017

    def test_minimal_document(self):
        record = LogRecord.from_dict({"data": "x"})

        assert record.source == ""
        assert record.container == ContainerInfo()
        assert record.container.node is None
        assert record.time.tzinfo is not None

    def test_null_config_and_cmd(self):
        record = LogRecord.from_dict(
            {"data": "x", "container": {"config": {"cmd": None, "labels": None}}}
        )
        assert record.container.cmd == ()
        assert record.container.labels == {}


class TestContainerInfo:
    def test_labels_are_read_only(self):
        container = ContainerInfo(labels={"a": "b"})
        with pytest.raises(TypeError):
            container.labels["c"] = "d"
        assert dict(container.labels) == {"a": "b"}


class TestFromDictCoercion:
    def test_null_strings_become_empty(self):
        record = LogRecord.from_dict(
            {
                "source": None,
                "data": None,
                "container": {
                    "id": None,
                    "name": None,
                    "image": None,
                    "config": {"image": None},
                    "node": {"name": None},
                },
            }
        )

        assert record.source == ""
        assert record.data == ""
        assert record.container.id == ""
        assert record.container.name == ""
        assert record.container.image == ""
        assert record.container.config_image == ""
        assert record.container.node.name == ""

    def test_non_string_tokens_and_labels(self):
        container = ContainerInfo.from_dict(
            {"config": {"cmd": ["sleep", 10], "labels": {"replicas": 3, "x": None}}}
        )

        assert container.cmd == ("sleep", "10")
        assert dict(container.labels) == {"replicas": "3", "x": ""}
