import asyncio

import pytest

from spout2gelf.aio import wait_task


class TestWaitTask:
    @pytest.mark.asyncio
    async def test_result(self):
        async def value():
            return 42

        assert await wait_task(value(), event=asyncio.Event()) == (42, False)

    @pytest.mark.asyncio
    async def test_interrupted_by_event(self):
        event = asyncio.Event()
        cancelled = asyncio.Event()

        async def forever():
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        task = asyncio.create_task(wait_task(forever(), event=event))
        await asyncio.sleep(0.01)
        event.set()

        assert await asyncio.wait_for(task, timeout=5.0) == (None, True)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_exception_propagates(self):
        async def broken():
            raise RuntimeError("broken")

        with pytest.raises(RuntimeError):
            await wait_task(broken(), event=asyncio.Event())
