"""
Periodic background tasks bound to the FastAPI application lifecycle.

A task awaits its callable every `interval_seconds`. Exceptions are logged and
the loop keeps going; cancellation on shutdown ends it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List

from fastapi import FastAPI

_TASKS_STATE_KEY = "periodic_tasks"


# PUBLIC_INTERFACE
def start_periodic_task(
    app: FastAPI,
    *,
    name: str,
    interval_seconds: float,
    func: Callable[[], Awaitable[None]],
    logger: logging.Logger,
) -> "asyncio.Task[None]":
    """
    Start a periodic task and register it on app.state so it can be stopped.
    """
    tasks: List["asyncio.Task[None]"] = getattr(app.state, _TASKS_STATE_KEY, None) or []
    setattr(app.state, _TASKS_STATE_KEY, tasks)

    async def _runner() -> None:
        while True:
            try:
                await func()
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001 - keep polling after a failed step
                logger.exception("Periodic task %s failed", name)
            await asyncio.sleep(interval_seconds)

    task = asyncio.create_task(_runner(), name=name)
    tasks.append(task)
    logger.info("Started periodic task %s (every %ss)", name, interval_seconds)
    return task


# PUBLIC_INTERFACE
async def stop_periodic_tasks(app: FastAPI, *, logger: logging.Logger) -> None:
    """Cancel all periodic tasks registered on app.state and wait for them."""
    tasks: List["asyncio.Task[None]"] = getattr(app.state, _TASKS_STATE_KEY, None) or []
    if not tasks:
        return
    for t in tasks:
        t.cancel()
    try:
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        setattr(app.state, _TASKS_STATE_KEY, [])
        logger.info("Stopped %d periodic task(s)", len(tasks))
