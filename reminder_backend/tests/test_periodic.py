import asyncio
import logging

from fastapi import FastAPI

from src.api.periodic import start_periodic_task, stop_periodic_tasks

logger = logging.getLogger("test.periodic")


def test_periodic_task_survives_errors_and_stops():
    app = FastAPI()
    calls = []

    async def step() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            raise RuntimeError("first step fails")

    async def scenario() -> None:
        task = start_periodic_task(app, name="sample", interval_seconds=0.01, func=step, logger=logger)
        await asyncio.sleep(0.1)
        await stop_periodic_tasks(app, logger=logger)
        assert task.cancelled() or task.done()

    asyncio.run(scenario())
    assert len(calls) >= 2
    assert app.state.periodic_tasks == []


def test_stop_without_tasks_is_noop():
    app = FastAPI()
    asyncio.run(stop_periodic_tasks(app, logger=logger))
