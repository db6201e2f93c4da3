# orchestration/task_chain.py
"""Composition of asynchronous tasks."""

from __future__ import annotations

from typing import Generic, Protocol, TypeVar

TIn = TypeVar("TIn", contravariant=True)
TOut = TypeVar("TOut", covariant=True)
A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


class Task(Protocol[TIn, TOut]):
    """Anything with an async ``run`` taking one input."""

    async def run(self, input: TIn) -> TOut: ...


class TaskChain(Generic[A, B, C]):
    """Run ``first`` and feed its result into ``second``."""

    def __init__(self, first: Task[A, B], second: Task[B, C]) -> None:
        self.first = first
        self.second = second

    async def run(self, input: A) -> C:
        intermediate = await self.first.run(input)
        return await self.second.run(intermediate)
