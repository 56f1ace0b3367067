"""HTTP client for the diff server (upload for comparison, export of merges)."""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

import httpx

from diffchange.adapters.http_resilience import ResilienceConfig, ResilientClient
from diffchange.adapters.payload import export_filename
from diffchange.config.server import DiffServerConfig, get_diff_server_config
from diffchange.domain.errors import ParseFailure, TransportFailure
from diffchange.domain.model import PayloadFormat
from diffchange.domain.ports.fetching import ExportedArtifact

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

log = getLogger(__name__)

_FILENAME_PATTERN = re.compile(r"""filename\*?=(?:UTF-8'')?"?([^";]+)"?""", re.IGNORECASE)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _file_part(file: BinaryIO, fallback_name: str) -> tuple[str, bytes, str]:
    name = Path(str(getattr(file, "name", "") or fallback_name)).name
    return name, file.read(), "text/plain"


def _raise_for_transport(response: httpx.Response) -> None:
    if not response.is_error:
        return
    body = response.text.strip()
    message = body or f"HTTP {response.status_code} {response.reason_phrase}".strip()
    log.error(f"Diff server error {response.status_code}: {message}")
    raise TransportFailure(message, status_code=response.status_code)


def _decode_json_object(response: httpx.Response) -> dict[str, object]:
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise ParseFailure(f"Server did not return JSON (Content-Type: {content_type or 'none'})")
    if not response.content.strip():
        raise ParseFailure("Server returned an empty response")
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseFailure(f"Could not parse server response: {exc}") from exc
    if not isinstance(payload, dict):
        raise ParseFailure(f"Unexpected response payload type: {type(payload).__name__}")
    return payload


def _attachment_filename(response: httpx.Response) -> str | None:
    disposition = response.headers.get("content-disposition")
    if not disposition:
        return None
    match = _FILENAME_PATTERN.search(disposition)
    return match.group(1).strip() if match else None


@dataclass(slots=True)
class DiffServerClient:
    config: DiffServerConfig = field(default_factory=get_diff_server_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def compare(self, old: BinaryIO, new: BinaryIO) -> dict[str, object]:
        return asyncio.run(self.compare_async(old, new))

    def export(self, payload: Mapping[str, object]) -> ExportedArtifact:
        return asyncio.run(self.export_async(payload))

    async def compare_async(self, old: BinaryIO, new: BinaryIO) -> dict[str, object]:
        files = {"old": _file_part(old, "old.txt"), "new": _file_part(new, "new.txt")}
        log.info(
            "Uploading for comparison: old=%s (%s bytes), new=%s (%s bytes)",
            files["old"][0],
            len(files["old"][1]),
            files["new"][0],
            len(files["new"][1]),
        )
        response = await self._post(self.config.upload_path, files=files)
        payload = _decode_json_object(response)
        records = payload.get("records")
        log.info(
            "Received diff: format=%s, records=%s",
            payload.get("format"),
            len(records) if isinstance(records, list) else 0,
        )
        return payload

    async def export_async(self, payload: Mapping[str, object]) -> ExportedArtifact:
        response = await self._post(self.config.export_path, body=dict(payload))
        raw_format = payload.get("format")
        payload_format = (
            PayloadFormat(raw_format) if raw_format in set(PayloadFormat) else PayloadFormat.LINE
        )
        filename = _attachment_filename(response) or export_filename(payload_format)
        log.info("Exported %s (%s bytes)", filename, len(response.content))
        return ExportedArtifact(filename=filename, content=response.content)

    async def _post(
        self,
        path: str,
        *,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        body: object = None,
    ) -> httpx.Response:
        url = f"{self.config.base_url}{path}"
        async with self.client_factory(self.config.resilience) as client:
            try:
                if files is not None:
                    response = await client.post(url, files=files)
                else:
                    response = await client.post(url, json=body)
            except httpx.HTTPError as exc:
                message = str(exc) or exc.__class__.__name__
                log.error(f"Diff server unreachable at {url}: {message}")
                raise TransportFailure(message) from exc
        _raise_for_transport(response)
        return response


if TYPE_CHECKING:
    from diffchange.domain.ports.fetching import DiffFetcher, MergeExporter

    _fetcher_check: DiffFetcher = DiffServerClient().compare
    _exporter_check: MergeExporter = DiffServerClient().export
