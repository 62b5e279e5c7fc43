import asyncio
import logging
import os
import signal
import time
from typing import Optional

__all__ = ("Command",)


class ExceptionExit(SystemExit):
    code = 1


class TimeoutExit(SystemExit):
    code = 2


class ForceExit(SystemExit):
    code = 3


class Command:
    def __init__(self, *, execute_timeout: float = 30):
        super().__init__()

        self._loop = None
        self._logger = logging.getLogger(self.__class__.__name__)

        self._execute_timeout = execute_timeout
        self._execute_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
        return self._loop

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def execute_timeout(self):
        return self._execute_timeout

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    def start(self, *args, **kwargs) -> int:
        if os.name == "nt":
            return self.start_win(*args, **kwargs)

        for s in (signal.SIGINT, signal.SIGTERM):
            self.loop.add_signal_handler(s, self._on_exit, s)

        try:
            return self.loop.run_until_complete(self.start_async(*args, **kwargs))
        finally:
            self.loop.close()

    def start_win(self, *args, **kwargs) -> int:
        try:
            return self.loop.run_until_complete(self.start_async(*args, **kwargs))
        except KeyboardInterrupt:
            self._on_exit(signal.SIGINT)
            return 0

    async def start_async(self, *args, **kwargs) -> int:
        time_start = time.time()
        try:
            self.logger.info("Starting %s...", self.__class__.__name__)

            execute_dt = await self._start_async(*args, **kwargs)

            self.logger.info(
                "Finished %s with exit code 0. elapsed: %.3fs execute: %.3fs",
                self.__class__.__name__,
                time.time() - time_start,
                execute_dt,
            )
            return 0
        except SystemExit as e:
            self.logger.info(
                "Finished %s with exit code %d (%s). elapsed %.3fs",
                self.__class__.__name__,
                e.code,
                e.__class__.__name__,
                time.time() - time_start,
            )
            return e.code

    async def _start_async(self, *args, **kwargs) -> float:
        time_exec_start = time.time()

        if not self.is_running:
            return 0.0

        self._execute_task = asyncio.create_task(self.execute(*args, **kwargs))
        stop_task = asyncio.create_task(self._stop_event.wait())
        try:
            await asyncio.wait(
                [self._execute_task, stop_task], return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            stop_task.cancel()

        if not self._execute_task.done():
            # stop requested: give execute a chance to drain
            self.logger.debug(
                "Waiting for execute to finish within %.2fs...", self.execute_timeout
            )
            try:
                await asyncio.wait_for(
                    asyncio.shield(self._execute_task), timeout=self.execute_timeout
                )
            except asyncio.TimeoutError as e:
                self.logger.error(
                    "execute has not finished within %.2fs", self.execute_timeout
                )
                self._execute_task.cancel()
                raise TimeoutExit() from e
            except Exception as e:
                self.logger.exception("execute has finished with an exception: %s", e)
                raise ExceptionExit() from e
            return time.time() - time_exec_start

        self._stop_event.set()
        if not self._execute_task.cancelled():
            exc = self._execute_task.exception()
            if exc is not None:
                self.logger.exception(
                    "execute has finished with an exception: %s", exc, exc_info=exc
                )
                raise ExceptionExit() from exc
            self.logger.info("execute has finished successfully")

        return time.time() - time_exec_start

    def _on_exit(self, sig):
        if self._stop_event.is_set():
            raise ForceExit()

        self.logger.info(
            "Got %s signal - exiting",
            signal.Signals(sig).name,  # pylint: disable=no-member
        )
        self._stop_event.set()

    async def execute(self, *args, **kwargs):
        pass
