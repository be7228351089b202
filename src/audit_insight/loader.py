"""Artifact probing and loading.

Artifacts are fetched relative to one base location, either an http(s)
URL or a local directory. Every category is probed and loaded on its own
so a missing or broken report never blocks the others.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import httpx

from . import __version__
from .exceptions import ArtifactError, MalformedArtifactError
from .models import Category, LoadWarning


logger = logging.getLogger(__name__)

SUMMARY_ARTIFACT = "comprehensive-audit-report.json"
EXCLUDE_CONFIG_ARTIFACT = "ui-code-insight.config.json"

DEFAULT_HEADERS = {
    "User-Agent": f"audit-insight/{__version__}",
    "Accept": "application/json",
}


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class ArtifactSource(ABC):
    """Read-only access to the JSON artifacts under one base location."""

    location: str

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Lightweight existence check. Must not raise."""

    @abstractmethod
    async def read_text(self, name: str) -> str:
        """Fetch the raw artifact text, raising ArtifactError on failure."""

    async def read_json(self, name: str) -> Any:
        text = await self.read_text(name)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedArtifactError(name, f"invalid JSON: {e}") from e
        except ValueError as e:
            # numbers past the interpreter's int conversion limit
            raise MalformedArtifactError(name, f"unreadable number: {e}") from e
        except RecursionError as e:
            raise MalformedArtifactError(name, "nested too deeply") from e

    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> "ArtifactSource":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class HttpArtifactSource(ArtifactSource):
    """Artifacts served over HTTP."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.location = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            kwargs: dict[str, Any] = {"headers": DEFAULT_HEADERS, "follow_redirects": True}
            if timeout is not None:
                kwargs["timeout"] = timeout
            client = httpx.AsyncClient(**kwargs)
        self.client = client

    def url_for(self, name: str) -> str:
        return f"{self.location}/{name}"

    async def exists(self, name: str) -> bool:
        try:
            response = await self.client.head(self.url_for(name))
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, OverflowError) as e:
            logger.debug("Probe for %s failed: %s", name, e)
            return False
        if response.status_code == 405:
            # Some static servers reject HEAD; let the load decide.
            return True
        return response.is_success

    async def read_text(self, name: str) -> str:
        url = self.url_for(name)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ArtifactError(name, "timed out") from e
        except httpx.HTTPStatusError as e:
            raise ArtifactError(name, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ArtifactError(name, f"request failed: {e}") from e
        except (httpx.InvalidURL, ValueError, OverflowError) as e:
            raise ArtifactError(name, f"invalid URL: {e}") from e
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class DirectoryArtifactSource(ArtifactSource):
    """Artifacts stored as files in a local directory."""

    def __init__(self, directory: str | Path):
        self.root = Path(directory)
        self.location = str(self.root)

    async def exists(self, name: str) -> bool:
        return (self.root / name).is_file()

    async def read_text(self, name: str) -> str:
        path = self.root / name
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedArtifactError(name, "not UTF-8 text") from e
        except OSError as e:
            raise ArtifactError(name, e.strerror or str(e)) from e


def open_source(location: str, timeout: Optional[float] = None) -> ArtifactSource:
    """Pick the source implementation for a base location."""
    if is_url(location):
        return HttpArtifactSource(location, timeout=timeout)
    return DirectoryArtifactSource(location)


@dataclass
class LoadResult:
    """Everything fetched in one load cycle."""
    location: str
    artifacts: dict[Category, Any] = field(default_factory=dict)
    present: set[Category] = field(default_factory=set)
    summary: Optional[Any] = None
    exclusions: Optional[Any] = None
    warnings: list[LoadWarning] = field(default_factory=list)

    def has(self, category: Category) -> bool:
        return category in self.artifacts

    def warnings_for(self, category: Category) -> list[LoadWarning]:
        return [w for w in self.warnings if w.category == category]


class ArtifactLoader:
    """Probe and load category artifacts from one source."""

    def __init__(self, source: ArtifactSource, exclude_config: str = EXCLUDE_CONFIG_ARTIFACT):
        self.source = source
        self.exclude_config = exclude_config

    async def probe(self, category: Category) -> bool:
        """Return whether the category's artifact exists."""
        if not category.artifact:
            return False
        return await self.source.exists(category.artifact)

    async def load(self, category: Category) -> Optional[Any]:
        """Return the parsed artifact, or None when it is absent or broken."""
        if not await self.probe(category):
            return None
        data, _ = await self._fetch(category.artifact, category)
        return data

    async def _fetch(
        self, name: str, category: Optional[Category]
    ) -> tuple[Optional[Any], Optional[LoadWarning]]:
        try:
            return await self.source.read_json(name), None
        except ArtifactError as e:
            logger.warning("Could not load %s: %s", name, e.message)
            return None, LoadWarning(category=category, artifact=name, message=e.message)
        except Exception as e:
            logger.warning("Could not load %s: %s", name, e)
            return None, LoadWarning(category=category, artifact=name, message=f"could not load: {e}")

    async def _probe_and_fetch(
        self, name: str, category: Optional[Category]
    ) -> tuple[bool, Optional[Any], Optional[LoadWarning]]:
        if not await self.source.exists(name):
            logger.debug("Artifact %s not present", name)
            return False, None, None
        data, warning = await self._fetch(name, category)
        return True, data, warning

    async def load_all(self, categories: Optional[Iterable[Category]] = None) -> LoadResult:
        """Probe and load every category concurrently.

        Summary and exclusion-config artifacts are fetched in the same
        batch. Latency is bounded by the slowest single artifact.
        """
        if categories is None:
            categories = Category.auditable()
        categories = [c for c in categories if c.artifact]

        jobs = [self._probe_and_fetch(c.artifact, c) for c in categories]
        jobs.append(self._probe_and_fetch(SUMMARY_ARTIFACT, None))
        jobs.append(self._probe_and_fetch(self.exclude_config, None))
        outcomes = await asyncio.gather(*jobs)

        result = LoadResult(location=self.source.location)
        for category, (present, data, warning) in zip(categories, outcomes):
            if present:
                result.present.add(category)
            if data is not None:
                result.artifacts[category] = data
            if warning:
                result.warnings.append(warning)

        for slot, (_, data, warning) in zip(("summary", "exclusions"), outcomes[len(categories):]):
            setattr(result, slot, data)
            if warning:
                result.warnings.append(warning)

        logger.info(
            "Loaded %d of %d artifacts from %s",
            len(result.artifacts), len(categories), result.location,
        )
        return result


async def load_artifacts(
    location: str,
    categories: Optional[Iterable[Category]] = None,
    exclude_config: str = EXCLUDE_CONFIG_ARTIFACT,
    timeout: Optional[float] = None,
) -> LoadResult:
    """Open a source for ``location`` and load everything from it."""
    async with open_source(location, timeout=timeout) as source:
        return await ArtifactLoader(source, exclude_config=exclude_config).load_all(categories)
