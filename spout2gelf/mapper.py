import datetime

from spout2gelf.gelf import GELF_VERSION, GelfMessage, Level
from spout2gelf.identity import ProcessIdentity
from spout2gelf.types import LogRecord

CONTAINER_NAME_LABEL = "io.rancher.container.name"

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
_MICROSECOND = datetime.timedelta(microseconds=1)


def host_for(record: LogRecord, identity: ProcessIdentity) -> str:
    return record.container.labels.get(CONTAINER_NAME_LABEL) or identity.hostname


def level_for(source: str) -> Level:
    if source == "stderr":
        return Level.ERR
    return Level.INFO


def time_unix(timestamp: datetime.datetime) -> float:
    """Seconds since epoch, truncated toward zero to whole milliseconds."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    micros = (timestamp - _EPOCH) // _MICROSECOND
    millis = abs(micros) // 1000
    if micros < 0:
        millis = -millis
    return millis / 1000.0


def map_record(
    record: LogRecord, identity: ProcessIdentity, raw_extra: bytes
) -> GelfMessage:
    return GelfMessage(
        version=GELF_VERSION,
        host=host_for(record, identity),
        short=record.data,
        time_unix=time_unix(record.time),
        level=level_for(record.source),
        raw_extra=raw_extra,
    )
