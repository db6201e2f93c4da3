# storage/version_store.py
"""Persistence of execution records, one JSON file per record id."""

from __future__ import annotations

import asyncio
import os
import time
import uuid
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from config import settings

logger = structlog.get_logger(__name__)


def generate_record_id() -> str:
    return str(uuid.uuid4())


def _now_ms() -> int:
    return int(time.time() * 1000)


class ExecutionRecord(BaseModel):
    """Snapshot of one orchestrated run, kept for auditability."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int = Field(default_factory=_now_ms)
    template: str
    options: dict[str, Any]


class VersionStore:
    """Write execution records under ``store_path``."""

    def __init__(self, store_path: str = settings.PROMPT_VERSIONS_DIR) -> None:
        self.store_path = store_path

    def path_for(self, record_id: str) -> str:
        return os.path.join(self.store_path, f"{record_id}.json")

    async def save(self, record: ExecutionRecord) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._save_sync, record)

    def _save_sync(self, record: ExecutionRecord) -> str:
        os.makedirs(self.store_path, exist_ok=True)
        file_path = self.path_for(record.id)
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(record.model_dump_json(indent=2))
        logger.debug("Execution record written", record_id=record.id, path=file_path)
        return file_path
