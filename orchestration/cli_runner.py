# orchestration/cli_runner.py
"""Command-line runner for single prompts and batches."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from core.backend_resolver import backend_resolver
from core.options import ExecutionOptions
from orchestration.bounded_executor import BoundedExecutor
from orchestration.prompt_task import PromptTask, VersioningOptions, create_prompt_task
from utils.logging import setup_logging

logger = structlog.get_logger(__name__)


def parse_bindings(pairs: Sequence[str]) -> dict[str, Any]:
    """Turn ``key=value`` strings into bindings; dotted keys nest."""
    bindings: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        target = bindings
        *parents, leaf = key.split(".")
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value
    return bindings


def load_inputs(path: str) -> list[dict[str, Any]]:
    """Read one JSON object of bindings per non-blank line."""
    inputs: list[dict[str, Any]] = []
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            row = json.loads(line)
            if not isinstance(row, dict):
                raise ValueError(f"{path}:{line_no}: expected a JSON object")
            inputs.append(row)
    return inputs


def format_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False)


async def run_batch(
    task: PromptTask[Any],
    inputs: Sequence[Mapping[str, Any]],
    base_bindings: Mapping[str, Any],
    concurrency: int,
) -> list[Any]:
    executor: BoundedExecutor[Mapping[str, Any], Any] = BoundedExecutor(concurrency)

    async def _job(row: Mapping[str, Any]) -> Any:
        return await task.run({**base_bindings, **row})

    return await executor.execute_all(inputs, _job)


async def _run(
    template: str,
    options: ExecutionOptions,
    base_bindings: dict[str, Any],
    inputs_path: str | None,
    concurrency: int,
    versioning: VersioningOptions,
) -> None:
    task = create_prompt_task(template, options, versioning)
    try:
        if inputs_path is None:
            print(format_result(await task.run(base_bindings)))
            return
        inputs = load_inputs(inputs_path)
        results = await run_batch(task, inputs, base_bindings, concurrency)
        for result in results:
            print(json.dumps(result, ensure_ascii=False))
    finally:
        for family, usage in backend_resolver.usage_by_family().items():
            logger.info("Token usage for run", family=family, **usage)
        await backend_resolver.aclose()


def run(
    template: str,
    options: ExecutionOptions,
    bindings: dict[str, Any],
    inputs_path: str | None,
    concurrency: int,
    versioning: VersioningOptions,
) -> None:
    """Configure logging and execute the requested prompt or batch."""
    setup_logging()
    try:
        asyncio.run(
            _run(template, options, bindings, inputs_path, concurrency, versioning)
        )
    except KeyboardInterrupt:
        logger.info("Promptline shutting down due to KeyboardInterrupt...")
