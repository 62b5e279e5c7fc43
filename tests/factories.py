import datetime

from spout2gelf.types import ContainerInfo, LogRecord, SwarmNode

CREATED = datetime.datetime(2017, 7, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
TIME = datetime.datetime(2017, 7, 14, 2, 40, 0, 123456, tzinfo=datetime.timezone.utc)


def make_record(
    data: str = "hello world",
    source: str = "stdout",
    labels: dict = None,
    name: str = "/web-1",
    node: SwarmNode = None,
    time: datetime.datetime = TIME,
) -> LogRecord:
    return LogRecord(
        source=source,
        data=data,
        time=time,
        container=ContainerInfo(
            id="3f2a9c",
            name=name,
            image="sha256:abcdef",
            created=CREATED,
            config_image="nginx:1.13",
            cmd=("nginx", "-g", "daemon off;"),
            labels=labels or {},
            node=node,
        ),
    )


