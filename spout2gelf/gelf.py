import asyncio
import enum
import json
import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

from yarl import URL

from spout2gelf.router import adapter_transports
from spout2gelf.utils import ENCODERS, size_str

GELF_VERSION = "1.1"

CHUNK_MAGIC = b"\x1e\x0f"
CHUNK_HEADER_SIZE = 12  # magic(2) + message id(8) + seq(1) + count(1)
MAX_CHUNKS = 128
DEFAULT_CHUNK_SIZE = 1420


class Level(enum.IntEnum):
    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


class GelfWriteError(Exception):
    pass


@dataclass(frozen=True)
class GelfMessage:
    version: str
    host: str
    short: str
    time_unix: float
    level: Level
    raw_extra: bytes = b""
    full: str = ""
    facility: str = ""

    def to_json(self) -> bytes:
        doc = {"version": self.version}
        if self.host:
            doc["host"] = self.host
        doc["short_message"] = self.short
        if self.full:
            doc["full_message"] = self.full
        doc["timestamp"] = self.time_unix
        doc["level"] = int(self.level)
        if self.facility:
            doc["facility"] = self.facility

        data = json.dumps(doc, separators=(",", ":"), ensure_ascii=False).encode(
            "utf-8"
        )

        extra = self.raw_extra.strip()
        if not extra:
            return data

        if not (extra.startswith(b"{") and extra.endswith(b"}")):
            raise ValueError("raw extra fields must be a JSON object")

        # splice the pre-encoded members in at the top level
        members = extra[1:-1].strip()
        if not members:
            return data
        return data[:-1] + b"," + members + b"}"


def parse_address(address: str) -> tuple[str, int]:
    url = URL(f"gelf://{address}")
    if not url.host or url.port is None:
        raise ValueError(f"address must be host:port, got {address!r}")
    if url.raw_path not in ("", "/") or url.raw_query_string or url.raw_fragment:
        raise ValueError(f"address must be host:port, got {address!r}")
    return url.host, url.port


def make_chunks(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[bytes]:
    if len(data) <= chunk_size:
        return [data]

    body_size = chunk_size - CHUNK_HEADER_SIZE
    count = math.ceil(len(data) / body_size)
    if count > MAX_CHUNKS:
        raise GelfWriteError(
            f"message of {size_str(len(data))} needs {count} chunks, "
            f"at most {MAX_CHUNKS} are allowed"
        )

    message_id = os.urandom(8)
    return [
        CHUNK_MAGIC
        + message_id
        + bytes((seq, count))
        + data[seq * body_size : (seq + 1) * body_size]
        for seq in range(count)
    ]


class GelfWriter:
    def __init__(self, host: str, port: int, *, dry_run: bool = False):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.host = host
        self.port = port
        self.dry_run = dry_run

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    async def open(cls, address: str, **kwargs) -> "GelfWriter":
        host, port = parse_address(address)
        writer = cls(host, port, **kwargs)
        await writer.connect()
        return writer

    async def connect(self):
        pass

    async def write_message(self, msg: GelfMessage):
        raise NotImplementedError

    async def close(self):
        pass


class _GelfDatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def error_received(self, exc):
        self.logger.warning("gelf udp error: %s", exc)


class GelfUdpWriter(GelfWriter):
    def __init__(
        self,
        host: str,
        port: int,
        *,
        compression: str = "gzip",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        dry_run: bool = False,
    ):
        super().__init__(host, port, dry_run=dry_run)
        if compression not in ENCODERS:
            raise ValueError(
                f"Unknown compression {compression!r}. "
                f"Possible values are: ({', '.join(ENCODERS)})"
            )
        if chunk_size <= CHUNK_HEADER_SIZE:
            raise ValueError(f"chunk size must exceed {CHUNK_HEADER_SIZE} bytes")

        self.compression = compression
        self.chunk_size = chunk_size
        self._encode = ENCODERS[compression]
        self._transport: Optional[asyncio.DatagramTransport] = None

    async def connect(self):
        if self.dry_run:
            return

        loop = asyncio.get_running_loop()
        self._transport, _ = await loop.create_datagram_endpoint(
            lambda: _GelfDatagramProtocol(self.logger),
            remote_addr=(self.host, self.port),
        )

    async def write_message(self, msg: GelfMessage):
        payload = self._encode(msg.to_json())
        chunks = make_chunks(payload, self.chunk_size)

        if self.dry_run:
            self.logger.info(
                "[DRY_RUN] sending gelf message to %s: %s in %d chunk(s)",
                self.address,
                size_str(len(payload)),
                len(chunks),
            )
            return

        if self._transport is None or self._transport.is_closing():
            raise GelfWriteError(f"udp writer for {self.address} is not connected")

        for chunk in chunks:
            self._transport.sendto(chunk)

    async def close(self):
        if self._transport is not None:
            self._transport.close()
            self._transport = None


class GelfTcpWriter(GelfWriter):
    def __init__(self, host: str, port: int, *, dry_run: bool = False):
        super().__init__(host, port, dry_run=dry_run)
        self._writer: Optional[asyncio.StreamWriter] = None

    async def connect(self):
        if self.dry_run:
            return

        _, self._writer = await asyncio.open_connection(self.host, self.port)
        self.logger.info("connected to %s", self.address)

    async def write_message(self, msg: GelfMessage):
        data = msg.to_json() + b"\0"

        if self.dry_run:
            self.logger.info(
                "[DRY_RUN] sending gelf message to %s: %s",
                self.address,
                size_str(len(data)),
            )
            return

        try:
            if self._writer is None:
                await self.connect()
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            await self._drop_connection()
            raise GelfWriteError(f"error writing to {self.address}: {e}") from e

    async def _drop_connection(self):
        writer, self._writer = self._writer, None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass

    async def close(self):
        await self._drop_connection()


adapter_transports.register(GelfUdpWriter.open, "udp")
adapter_transports.register(GelfTcpWriter.open, "tcp")
