import logging
from collections.abc import AsyncIterable

from spout2gelf.fields import FieldsEncodeError, extra_fields
from spout2gelf.gelf import GelfWriter
from spout2gelf.identity import ProcessIdentity
from spout2gelf.mapper import map_record
from spout2gelf.router import Route, adapter_factories, adapter_transports
from spout2gelf.types import LogRecord

DEFAULT_TRANSPORT = "udp"


class AdapterError(Exception):
    pass


class GelfAdapter:
    def __init__(self, route: Route, writer: GelfWriter, identity: ProcessIdentity):
        self.route = route
        self.writer = writer
        self.identity = identity
        self.logger = logging.getLogger(self.__class__.__name__)

        self.sent = 0
        self.dropped = 0

    @classmethod
    async def create(
        cls, route: Route, identity: ProcessIdentity, **writer_kwargs
    ) -> "GelfAdapter":
        transport = route.adapter_transport(DEFAULT_TRANSPORT)
        open_writer = adapter_transports.lookup(transport)
        if open_writer is None:
            raise AdapterError(f"unable to find adapter: {route.adapter}")

        try:
            writer = await open_writer(route.address, **writer_kwargs)
        except (ValueError, OSError) as e:
            raise AdapterError(
                f"unable to create {transport} writer for {route.address!r}: {e}"
            ) from e

        return cls(route=route, writer=writer, identity=identity)

    async def process(self, record: LogRecord) -> bool:
        try:
            extra = extra_fields(record, self.identity)
        except FieldsEncodeError as e:
            self.logger.error("Graylog: %s", e)
            return False

        msg = map_record(record, self.identity, extra)

        try:
            await self.writer.write_message(msg)
        except Exception as e:
            self.logger.exception("Graylog: %s", e)
            return False

        return True

    async def stream(self, logstream: AsyncIterable[LogRecord]):
        try:
            async for record in logstream:
                if await self.process(record):
                    self.sent += 1
                else:
                    self.dropped += 1
        finally:
            self.logger.info(
                "log stream finished. sent=%d dropped=%d", self.sent, self.dropped
            )
            await self.writer.close()


async def create_adapter(
    route: Route, identity: ProcessIdentity, **writer_kwargs
) -> GelfAdapter:
    factory = adapter_factories.lookup(route.adapter_type())
    if factory is None:
        raise AdapterError(f"unknown adapter: {route.adapter}")
    return await factory(route, identity, **writer_kwargs)


adapter_factories.register(GelfAdapter.create, "gelf")
