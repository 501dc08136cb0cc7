import asyncio

import pytest

from subroll.core.errors import PipelineCancelledError
from subroll.features.pipeline.service.cancellation import CancellationToken


@pytest.mark.asyncio
async def test_run_returns_result_when_not_cancelled():
    token = CancellationToken()

    async def work():
        return 42

    assert await token.run("stage", work()) == 42
    assert not token.cancelled


@pytest.mark.asyncio
async def test_cancel_aborts_in_flight_call():
    token = CancellationToken()
    started = asyncio.Event()
    aborted = asyncio.Event()

    async def slow():
        started.set()
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            aborted.set()
            raise

    async def cancel_soon():
        await started.wait()
        token.cancel()

    canceller = asyncio.ensure_future(cancel_soon())
    with pytest.raises(PipelineCancelledError) as exc:
        await token.run("transcribing", slow())
    await canceller

    assert aborted.is_set()
    assert exc.value.stage == "transcribing"
    assert exc.value.message == "Processing cancelled"


@pytest.mark.asyncio
async def test_already_cancelled_token_never_runs_call():
    token = CancellationToken()
    token.cancel("User closed the editor")
    ran = []

    async def work():
        ran.append(True)

    with pytest.raises(PipelineCancelledError) as exc:
        await token.run("fetching-broll", work())

    await asyncio.sleep(0)
    assert ran == []
    assert exc.value.message == "User closed the editor"


@pytest.mark.asyncio
async def test_errors_from_the_call_propagate():
    token = CancellationToken()

    async def broken():
        raise RuntimeError("backend down")

    with pytest.raises(RuntimeError, match="backend down"):
        await token.run("stage", broken())
