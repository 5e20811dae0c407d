"""
Artifact downloads.

Release files live in a Maven-style source repository at
``<repo>/<domain path>/<name>/<version>/<name>-<version><suffix>``. A download
streams the response body to disk chunk by chunk and reports progress to a
ProgressObserver after every chunk. There is no retry: one failed attempt
aborts the download and may leave a truncated file behind.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import httpx

from mpt_get.core.errors import StorageError
from mpt_get.models.package_id import PackageID
from mpt_get.observers.base import ProgressObserver, QuietObserver, compute_progress

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = "https://maven.aliyun.com/repository/public"
DEFAULT_SUFFIX = ".jar"
CHUNK_SIZE = 64 * 1024


def build_download_url(repo_url: str, package_id: PackageID, version: str, suffix: str) -> str:
    """
    Artifact URL for a package version.

    Nothing is escaped; identifiers and versions must already be URL-safe.
    """
    return (
        f"{repo_url}/{package_id.path_segment()}/{version}/"
        f"{package_id.name}-{version}{suffix}"
    )


@dataclass(frozen=True)
class SourceRepo:
    """Remote HTTP(S) host serving release artifacts."""

    url: str = DEFAULT_SOURCE_URL

    def download_url(self, package_id: PackageID, version: str, suffix: str = DEFAULT_SUFFIX) -> str:
        return build_download_url(self.url, package_id, version, suffix)


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        size = int(value)
    except ValueError:
        return None
    return size if size > 0 else None


class Downloader:
    """Downloads artifacts from a SourceRepo into ``package_path``."""

    def __init__(
        self,
        repo: SourceRepo,
        package_path: Path,
        observer: ProgressObserver | None = None,
        timeout: float | None = 30.0,
        proxy: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.repo = repo
        self.package_path = Path(package_path)
        self.observer = observer or QuietObserver()
        self.timeout = timeout
        self.proxy = proxy
        self.transport = transport
        self.chunk_size = chunk_size

    def artifact_path(self, package_id: PackageID, version: str, suffix: str = DEFAULT_SUFFIX) -> Path:
        """Default destination: ``<package_path>/<domain path>/<name>/<name>-<version><suffix>``."""
        return self.package_path / package_id.relative_path() / f"{package_id.name}-{version}{suffix}"

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.timeout, connect=60.0) if self.timeout else httpx.Timeout(None)
        kwargs = {"timeout": timeout, "follow_redirects": True, "transport": self.transport}
        if self.proxy:
            kwargs["proxy"] = self.proxy
        return httpx.AsyncClient(**kwargs)

    async def download(
        self,
        package_id: PackageID,
        version: str,
        output: Path | None = None,
        suffix: str = DEFAULT_SUFFIX,
    ) -> Path:
        """
        Stream one artifact to ``output`` (or the default artifact path).

        Args:
            package_id: Package to fetch.
            version: Exact version string, as published in the index.
            output: Destination file; parent directories are created.
            suffix: Artifact suffix appended after ``<name>-<version>``.

        Returns:
            The path written to.

        Raises:
            StorageError: On connection failure, a non-success status or a
                local write failure.
        """
        url = self.repo.download_url(package_id, version, suffix)
        target = Path(output) if output else self.artifact_path(package_id, version, suffix)

        logger.info(f"Downloading {url} -> {target}")
        self.observer.ready()

        try:
            async with self._client() as client:
                # identity encoding keeps byte counts comparable to Content-Length
                async with client.stream("GET", url, headers={"Accept-Encoding": "identity"}) as response:
                    response.raise_for_status()
                    total = _content_length(response)

                    target.parent.mkdir(parents=True, exist_ok=True)
                    received = 0
                    async with aiofiles.open(target, "wb") as f:
                        async for chunk in response.aiter_bytes(self.chunk_size):
                            await f.write(chunk)
                            received += len(chunk)
                            self.observer.update(
                                compute_progress(received, total), (received, total or 0)
                            )
        except httpx.HTTPStatusError as e:
            raise StorageError(f"{url} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise StorageError(f"failed to fetch {url}: {e}") from e
        except OSError as e:
            raise StorageError(f"cannot write {target}: {e}") from e
        finally:
            self.observer.finish()

        logger.info(f"Saved {package_id} {version} to {target}")
        return target
