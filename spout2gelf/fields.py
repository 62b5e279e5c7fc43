import datetime
import json
from typing import Any, Optional

from spout2gelf.identity import ProcessIdentity, local_hostname
from spout2gelf.types import LogRecord, as_str

RANCHER_STACK_SERVICE_LABEL = "io.rancher.stack_service.name"
LABEL_PREFIX = "gelf_"


class FieldsEncodeError(ValueError):
    pass


def container_name(name: str) -> str:
    if name.startswith("/"):
        return name[1:]
    return name


def rfc3339(dt: Optional[datetime.datetime]) -> str:
    """
    RFC 3339 with trailing zeros of the fraction trimmed and "Z" for UTC:
    2017-07-01T12:00:00.5Z
    """
    if dt is None:
        return ""

    text = dt.replace(microsecond=0, tzinfo=None).isoformat()
    if dt.microsecond:
        text += f".{dt.microsecond:06d}".rstrip("0")

    offset = dt.utcoffset()
    if not offset:
        return text + "Z"
    return text + dt.isoformat()[-6:]


def extract_fields(record: LogRecord, identity: ProcessIdentity) -> dict[str, Any]:
    container = record.container
    labels = container.labels

    fields = {
        "_container_id": as_str(container.id),
        "_container_name": container_name(as_str(container.name)),
        "_image_id": as_str(container.image),
        "_image_name": as_str(container.config_image),
        "_command": " ".join(as_str(token) for token in container.cmd),
        "_created": rfc3339(container.created),
        "_rancher_stack_service": labels.get(RANCHER_STACK_SERVICE_LABEL, ""),
        "_rancher_host": identity.hostname,
        "_logspout_instance": local_hostname(),
        "_logspout_source": record.source,
    }

    # gelf_foo=bar is shipped as _foo=bar: only four characters are cut,
    # the underscore of the prefix becomes the leading one of the field
    for name, value in labels.items():
        if len(name) > len(LABEL_PREFIX) and name[:5].lower() == LABEL_PREFIX:
            fields[name[4:]] = value

    if container.node is not None:
        fields["_swarm_node"] = container.node.name

    return fields


def encode_extra(fields: dict[str, Any]) -> bytes:
    try:
        return json.dumps(
            fields, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise FieldsEncodeError(f"unable to encode extra fields: {e}") from e


def extra_fields(record: LogRecord, identity: ProcessIdentity) -> bytes:
    try:
        fields = extract_fields(record, identity)
    except (AttributeError, TypeError, ValueError) as e:
        raise FieldsEncodeError(f"unable to extract extra fields: {e}") from e
    return encode_extra(fields)
