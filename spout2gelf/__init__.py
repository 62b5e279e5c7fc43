from spout2gelf.adapter import AdapterError, GelfAdapter, create_adapter
from spout2gelf.commands.forward import ForwardCommand, run_forward
from spout2gelf.gelf import GelfMessage, GelfTcpWriter, GelfUdpWriter, GelfWriter, Level
from spout2gelf.identity import ProcessIdentity, resolve_identity
from spout2gelf.router import Route
from spout2gelf.stream import LogStream
from spout2gelf.types import ContainerInfo, LogRecord, SwarmNode

__all__ = (
    "AdapterError",
    "ContainerInfo",
    "ForwardCommand",
    "GelfAdapter",
    "GelfMessage",
    "GelfTcpWriter",
    "GelfUdpWriter",
    "GelfWriter",
    "Level",
    "LogRecord",
    "LogStream",
    "ProcessIdentity",
    "Route",
    "SwarmNode",
    "create_adapter",
    "resolve_identity",
    "run_forward",
)
