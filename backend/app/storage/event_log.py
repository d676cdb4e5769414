"""Append-only JSONL logs for analytics events.

Each record is one JSON object per line. Writes within a process are
serialized with an asyncio lock; there is no cross-process coordination
and no durability guarantee beyond what the filesystem gives an append.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections import deque
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import orjson

logger = logging.getLogger(__name__)

TAIL_LIMIT = 100


class EventLog:
    """One append-only JSONL file."""

    def __init__(self, path: Path):
        self.path = path
        self._lock = asyncio.Lock()

    async def append(self, record: dict[str, Any], ip_address: str = "unknown") -> dict[str, Any]:
        """
        Stamp a record with server-side fields and append it.

        Args:
            record: Client-supplied fields
            ip_address: Resolved client IP

        Returns:
            The record as written
        """
        stamped = {
            **record,
            "id": time.time() * 1000 + random.random(),
            "server_timestamp": datetime.now(timezone.utc).isoformat(),
            "ip_address": ip_address,
        }
        line = orjson.dumps(stamped, default=str) + b"\n"

        async with self._lock:
            await asyncio.to_thread(self._write, line)
        return stamped

    def _write(self, line: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "ab") as f:
            f.write(line)

    def _read_lines(self) -> list[bytes]:
        if not self.path.exists():
            return []
        with open(self.path, "rb") as f:
            return f.read().splitlines()

    async def read_all(self) -> list[dict[str, Any]]:
        """Read every record, skipping lines that are not JSON objects."""
        lines = await asyncio.to_thread(self._read_lines)
        records = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = orjson.loads(line)
            except orjson.JSONDecodeError:
                logger.warning("Skipping corrupt line %d in %s", number, self.path)
                continue
            if isinstance(record, dict):
                records.append(record)
        return records

    async def tail(self, limit: int = TAIL_LIMIT) -> list[dict[str, Any]]:
        """Last ``limit`` records, oldest first."""
        return list(deque(await self.read_all(), maxlen=limit))


def _parse_time(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _bucket(value: Any, default: str) -> str:
    """Counting key for a client-supplied field; non-strings are stringified."""
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def registration_summary(
    records: list[dict[str, Any]],
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Summarize registration records.

    Args:
        records: Registration records, oldest first
        now: Reference time for the 24h window (defaults to current UTC)

    Returns:
        Dict with total, last24h, counts by source and tier, last 10 records
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=24)

    last24h = 0
    sources: dict[str, int] = {}
    tiers: dict[str, int] = {}
    for record in records:
        created = _parse_time(record.get("created_at"))
        if created is not None and created > cutoff:
            last24h += 1

        source = _bucket(record.get("utm_source") or record.get("referrer"), "direct")
        sources[source] = sources.get(source, 0) + 1

        tier = _bucket(record.get("subscription_tier"), "free")
        tiers[tier] = tiers.get(tier, 0) + 1

    return {
        "total": len(records),
        "last24h": last24h,
        "sources": sources,
        "tiers": tiers,
        "recent": records[-10:],
    }


def read_snapshot(paths: list[Path]) -> dict[str, Any] | None:
    """Load the first readable JSON object among candidate snapshot files."""
    for path in paths:
        if not path.exists():
            continue
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("Snapshot %s unreadable: %s", path, e)
            continue
        if isinstance(data, dict):
            return data
        logger.warning("Snapshot %s is not a JSON object", path)
    return None
