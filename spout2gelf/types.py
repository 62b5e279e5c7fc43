import datetime
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from frozendict import frozendict

# docker reports nanoseconds, datetime keeps microseconds
_fraction_re = re.compile(r"(\.\d{6})\d+")


def as_str(value) -> str:
    if value is None:
        return ""
    return str(value)


def parse_time(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None

    iso_dt = _fraction_re.sub(r"\1", value.rstrip("Z"))
    dt = datetime.datetime.fromisoformat(iso_dt)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


@dataclass(frozen=True)
class SwarmNode:
    name: str = ""


@dataclass(frozen=True)
class ContainerInfo:
    id: str = ""
    name: str = ""
    image: str = ""
    created: Optional[datetime.datetime] = None
    config_image: str = ""
    cmd: tuple[str, ...] = ()
    labels: Mapping[str, str] = field(default_factory=frozendict)
    node: Optional[SwarmNode] = None

    def __post_init__(self):
        object.__setattr__(self, "labels", frozendict(self.labels or {}))
        object.__setattr__(self, "cmd", tuple(self.cmd or ()))

    @classmethod
    def from_dict(cls, doc: dict) -> "ContainerInfo":
        config = doc.get("config") or {}
        node = doc.get("node")

        return cls(
            id=as_str(doc.get("id")),
            name=as_str(doc.get("name")),
            image=as_str(doc.get("image")),
            created=parse_time(doc.get("created")),
            config_image=as_str(config.get("image")),
            cmd=[as_str(token) for token in config.get("cmd") or ()],
            labels={
                as_str(key): as_str(value)
                for key, value in (config.get("labels") or {}).items()
            },
            node=SwarmNode(name=as_str(node.get("name"))) if node is not None else None,
        )


@dataclass(frozen=True)
class LogRecord:
    source: str
    data: str
    time: datetime.datetime
    container: ContainerInfo = field(default_factory=ContainerInfo)

    @classmethod
    def from_dict(cls, doc: dict) -> "LogRecord":
        """
        Build a record from a docker-style document:
        {"source": "stdout", "data": "...", "time": "2017-07-14T02:40:00.123Z",
         "container": {"id": ..., "name": "/web-1", "config": {"labels": {...}}}}
        """
        time = parse_time(doc.get("time"))
        if time is None:
            time = datetime.datetime.now(datetime.timezone.utc)

        return cls(
            source=as_str(doc.get("source")),
            data=as_str(doc.get("data")),
            time=time,
            container=ContainerInfo.from_dict(doc.get("container") or {}),
        )
