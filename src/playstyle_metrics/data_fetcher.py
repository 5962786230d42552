"""Team metric records from the metrics API or a local JSON file.

Fetched payloads can be kept in a file-based JSON cache with a TTL.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from pathlib import Path
from typing import Any

import httpx

from playstyle_metrics.config import Settings, get_settings
from playstyle_metrics.types import ResultBucket, TeamMetricValue

logger = logging.getLogger(__name__)

BUCKET_NAMES = {bucket.value for bucket in ResultBucket}

LEAGUE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class DataFetcher:
    """Fetch and cache raw team metric records from the metrics API."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings or get_settings()
        self._transport = transport
        self._cache_dir = self._settings.CACHE_DIR
        self._cache_ttl = self._settings.CACHE_TTL
        if self._settings.CACHE_ENABLED:
            self._cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_url(self) -> str:
        return f"{self._settings.API_BASE_URL.rstrip('/')}/{self._settings.API_VERSION}"

    async def get_metric_records(self, league_id: str) -> list[TeamMetricValue]:
        """Get all team metric records for a league, using cache when enabled."""
        validate_league_id(league_id)

        if self._settings.CACHE_ENABLED:
            cached = self._read_cache(league_id)
            if cached is not None:
                logger.debug("Cache hit for league %s", league_id)
                return parse_metric_records(cached)

        payload = await self._fetch_from_api(league_id)
        records = parse_metric_records(payload)
        if not records:
            raise RuntimeError(f"No metric records available for league '{league_id}'.")

        if self._settings.CACHE_ENABLED:
            self._write_cache(league_id, payload)
        return records

    async def _fetch_from_api(self, league_id: str) -> Any:
        url = f"{self.base_url}/leagues/{league_id}/team-metrics"

        async with httpx.AsyncClient(
            timeout=self._settings.API_TIMEOUT, transport=self._transport
        ) as client:
            resp = await client.get(url, headers={"Accept": "application/json"})

        if resp.status_code != 200:
            logger.error("Metrics API returned HTTP %s for %s", resp.status_code, url)
            raise RuntimeError(f"Metrics API returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise RuntimeError("Could not parse metrics API response.") from exc

        # Either a bare list or wrapped in {"data": ...}
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        if not isinstance(body, (list, dict)):
            raise RuntimeError("Could not parse metrics API response.")
        return body

    # --- Cache helpers ---

    def _cache_path(self, league_id: str) -> Path:
        return self._cache_dir / f"{league_id}.json"

    def _read_cache(self, league_id: str) -> Any | None:
        path = self._cache_path(league_id)
        if not path.exists():
            return None
        # Check TTL based on file mtime
        age = time.time() - path.stat().st_mtime
        if age > self._cache_ttl:
            return None
        try:
            return json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            return None

    def _write_cache(self, league_id: str, data: Any) -> None:
        path = self._cache_path(league_id)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(data))
            tmp.rename(path)
        except OSError:
            logger.warning("Could not write cache file %s", path)
            tmp.unlink(missing_ok=True)

    def clear_cache(self) -> None:
        """Remove all cached files."""
        for f in self._cache_dir.glob("*.json"):
            f.unlink(missing_ok=True)


def load_records_from_file(path: Path) -> list[TeamMetricValue]:
    """Read metric records from a local JSON file."""
    return parse_metric_records(json.loads(Path(path).read_text()))


def parse_metric_records(payload: Any) -> list[TeamMetricValue]:
    """Turn a JSON payload into TeamMetricValue records.

    Two shapes are accepted:
      - a list of ``{teamId, metricId, bucket, value}`` objects
        (snake_case keys work too; ``bucket`` defaults to "all")
      - a mapping ``{teamId: {all|win|draw|loss: {metrics: {id: {value}}}}}``
    Entries without a usable value are skipped.
    """
    if isinstance(payload, list):
        return _parse_flat(payload)
    if isinstance(payload, dict):
        return _parse_by_result(payload)
    raise ValueError(f"Unsupported metrics payload type: {type(payload).__name__}")


def _parse_flat(items: list) -> list[TeamMetricValue]:
    records: list[TeamMetricValue] = []
    skipped = 0

    for item in items:
        if not isinstance(item, dict):
            skipped += 1
            continue
        team_id = item.get("teamId", item.get("team_id"))
        metric_id = item.get("metricId", item.get("metric_id"))
        bucket = item.get("bucket", item.get("result", "all"))
        value = _to_float(item.get("value"))

        if not team_id or not metric_id or bucket not in BUCKET_NAMES or value is None:
            skipped += 1
            continue
        records.append(TeamMetricValue(
            team_id=str(team_id),
            metric_id=str(metric_id),
            bucket=ResultBucket(bucket),
            value=value,
        ))

    if skipped:
        logger.warning("Skipped %d malformed metric records", skipped)
    return records


def _parse_by_result(teams: dict) -> list[TeamMetricValue]:
    records: list[TeamMetricValue] = []
    skipped = 0

    for team_id, by_result in teams.items():
        if not isinstance(by_result, dict):
            skipped += 1
            continue
        for bucket, data in by_result.items():
            if bucket not in BUCKET_NAMES or not isinstance(data, dict):
                continue
            for metric_id, entry in (data.get("metrics") or {}).items():
                raw = entry.get("value") if isinstance(entry, dict) else entry
                value = _to_float(raw)
                if value is None:
                    skipped += 1
                    continue
                records.append(TeamMetricValue(
                    team_id=str(team_id),
                    metric_id=str(metric_id),
                    bucket=ResultBucket(bucket),
                    value=value,
                ))

    if skipped:
        logger.warning("Skipped %d malformed metric entries", skipped)
    return records


def _to_float(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def validate_league_id(league_id: str) -> str:
    """Reject league ids that are not plain slugs (e.g. "premier-league")."""
    if not isinstance(league_id, str) or not LEAGUE_ID_PATTERN.fullmatch(league_id):
        raise ValueError(f"Invalid league ID: {league_id!r}")
    return league_id
