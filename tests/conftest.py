"""
Shared pytest fixtures for golsdk tests.

- FakeConnection: stands in for transport.Connection, lets tests push frames
  and transport errors into a session by hand
- Recorder: collects on_gen_complete / on_err invocations
- FakeWebSocket: async-iterable websocket double for the real Connection
- frame(): builds a server generation frame as JSON text
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from golsdk.session import GameOfLifeSession


def frame(cells: list[tuple[int, int, bool]], generation_index: Any, **extra) -> str:
    """Build a server->client frame from (row, col, alive) tuples."""
    payload = {
        "cells": [{"row": r, "col": c, "alive": a} for r, c, a in cells],
        "generation_index": generation_index,
    }
    payload.update(extra)
    return json.dumps(payload)


class FakeConnection:
    """
    In-memory replacement for golsdk.transport.Connection.

    Frames passed to `emit` are delivered synchronously to the registered
    message handlers, mirroring the reader task's serialized dispatch.
    `frames_on_start` are scheduled on the loop once a StartSim is sent,
    followed by a server-side close when `close_after_frames` is set.
    """

    def __init__(
        self,
        fail_send: Exception | None = None,
        frames_on_start: list[str] | None = None,
        close_after_frames: bool = False,
    ):
        self.sent: list[str] = []
        self.message_handlers: list = []
        self.error_handlers: list = []
        self.close_handlers: list = []
        self.closed = False
        self.removed_listeners = 0
        self.fail_send = fail_send
        self.frames_on_start = frames_on_start or []
        self.close_after_frames = close_after_frames

    def on_message(self, handler) -> None:
        self.message_handlers.append(handler)

    def on_error(self, handler) -> None:
        self.error_handlers.append(handler)

    def on_close(self, handler) -> None:
        self.close_handlers.append(handler)

    def remove_all_listeners(self) -> None:
        self.removed_listeners += 1
        self.message_handlers.clear()
        self.error_handlers.clear()
        self.close_handlers.clear()

    async def send_text(self, text: str) -> None:
        if self.fail_send is not None:
            raise self.fail_send
        self.sent.append(text)
        if json.loads(text).get("type") == "StartSim":
            loop = asyncio.get_running_loop()
            for f in self.frames_on_start:
                loop.call_soon(self.emit, f)
            if self.close_after_frames:
                loop.call_soon(self.emit_close)

    async def close(self) -> None:
        self.closed = True

    def emit(self, data) -> None:
        for handler in list(self.message_handlers):
            handler(data)

    def emit_error(self, error: Exception) -> None:
        for handler in list(self.error_handlers):
            handler(error)

    def emit_close(self) -> None:
        for handler in list(self.close_handlers):
            handler()

    @property
    def sent_types(self) -> list[str]:
        return [json.loads(s)["type"] for s in self.sent]


CLOSE = object()


class FakeWebSocket:
    """Async-iterable websocket double fed from a queue; CLOSE ends iteration."""

    def __init__(self, *items, fail_close: Exception | None = None):
        self.queue: asyncio.Queue = asyncio.Queue()
        for item in items:
            self.queue.put_nowait(item)
        self.sent: list[str] = []
        self.closed = False
        self.fail_close = fail_close

    async def send(self, text):
        self.sent.append(text)

    async def close(self):
        if self.fail_close is not None:
            raise self.fail_close
        self.closed = True
        self.queue.put_nowait(CLOSE)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.queue.get()
        if item is CLOSE:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


def make_connector(connection: FakeConnection | None = None, error: Exception | None = None):
    """Build an async connector returning `connection` or raising `error`."""
    calls = []

    async def connector(url: str, open_timeout: float | None = None):
        calls.append((url, open_timeout))
        if error is not None:
            raise error
        return connection

    connector.calls = calls
    return connector


@dataclass
class Recorder:
    """Captures host callback invocations."""
    generations: list[list] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def on_gen_complete(self, cells) -> None:
        self.generations.append(list(cells))

    def on_err(self, message: str) -> None:
        self.errors.append(message)

    def generation_tuples(self) -> list[list[tuple[int, int, bool]]]:
        return [[c.as_tuple() for c in gen] for gen in self.generations]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def session(recorder, connection):
    """A session wired to a FakeConnection through a fake connector."""
    return GameOfLifeSession(
        url="ws://test/ws",
        on_gen_complete=recorder.on_gen_complete,
        on_err=recorder.on_err,
        connector=make_connector(connection),
    )
