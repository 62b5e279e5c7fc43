import asyncio
import json
import logging
import os
import sys
from typing import Any, Optional

from spout2gelf.adapter import DEFAULT_TRANSPORT, GelfAdapter, create_adapter
from spout2gelf.aio import wait_task
from spout2gelf.commands import Command
from spout2gelf.gelf import DEFAULT_CHUNK_SIZE
from spout2gelf.identity import (
    DEFAULT_METADATA_TIMEOUT,
    DEFAULT_METADATA_URL,
    ProcessIdentity,
    resolve_identity,
)
from spout2gelf.router import Route
from spout2gelf.stream import LogStream
from spout2gelf.types import LogRecord
from spout2gelf.utils import ENCODERS

INPUT_LINE_LIMIT = 1024 * 1024


class ForwardCommand(Command):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.dry_run = os.getenv("DRY_RUN") == "1"

        self.gelf_address = os.getenv("GELF_ADDRESS", "localhost:12201")
        self.gelf_adapter = os.getenv("GELF_ADAPTER", "gelf+udp")
        self.gelf_compression = os.getenv("GELF_COMPRESSION", "gzip")
        self.gelf_chunk_size = int(os.getenv("GELF_CHUNK_SIZE", DEFAULT_CHUNK_SIZE))

        self.metadata_url = os.getenv("METADATA_URL", DEFAULT_METADATA_URL)
        self.metadata_timeout = float(
            os.getenv("METADATA_TIMEOUT", DEFAULT_METADATA_TIMEOUT)
        )

        if self.gelf_compression not in ENCODERS:
            raise ValueError(
                "Unknown GELF_COMPRESSION. Possible values are: (gzip, zlib, none)"
            )

        self.route = Route(adapter=self.gelf_adapter, address=self.gelf_address)
        self.identity: Optional[ProcessIdentity] = None
        self.adapter: Optional[GelfAdapter] = None

    def writer_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"dry_run": self.dry_run}
        if self.route.adapter_transport(DEFAULT_TRANSPORT) == "udp":
            kwargs["compression"] = self.gelf_compression
            kwargs["chunk_size"] = self.gelf_chunk_size
        return kwargs

    async def execute(self):
        self.identity = await resolve_identity(
            self.metadata_url, timeout=self.metadata_timeout
        )
        self.adapter = await create_adapter(
            self.route, self.identity, **self.writer_kwargs()
        )
        self.logger.info(
            "forwarding to %s via %s as %r",
            self.route.address,
            self.route.adapter,
            self.identity.hostname,
        )

        logstream = self.make_log_stream()
        feeder = asyncio.create_task(self.feed(logstream))
        try:
            await self.adapter.stream(logstream)
        finally:
            if not feeder.done():
                feeder.cancel()

        await feeder

    def make_log_stream(self) -> LogStream:
        return LogStream()

    async def feed(self, logstream: LogStream):
        try:
            await wait_task(self.read_records(logstream), event=self.stop_event)
        finally:
            logstream.close()

    async def open_input(self) -> asyncio.StreamReader:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=INPUT_LINE_LIMIT)
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
        return reader

    async def read_records(self, logstream: LogStream):
        reader = await self.open_input()
        while True:
            line = await reader.readline()
            if not line:
                self.logger.info("input closed")
                return

            line = line.strip()
            if not line:
                continue

            try:
                record = LogRecord.from_dict(json.loads(line))
            except (ValueError, TypeError, AttributeError) as e:
                self.logger.warning("skipping undecodable record: %s", e)
                continue

            logstream.put_nowait(record)


def run_forward(cmd: ForwardCommand, setup_logging: bool = True) -> int:
    if setup_logging:
        logging.basicConfig(
            format="%(created)f %(asctime)s.%(msecs)03d [%(name)s] %(levelname)s: %(message)s",
            level=logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO,
        )
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)

    return cmd.start()
