from __future__ import annotations

import logging
import re
import shutil
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse
from urllib.request import (
    HTTPDefaultErrorHandler,
    HTTPErrorProcessor,
    HTTPHandler,
    HTTPRedirectHandler,
    HTTPSHandler,
    OpenerDirector,
    ProxyHandler,
    Request,
    UnknownHandler,
)

from issue_publisher.models.content_records import ContentRecord

LOGGER = logging.getLogger("issue_publisher.assets")

DEFAULT_EXTENSION = ".jpg"
IMAGE_CONTENT_TYPE_PREFIX = "image/"

_EXTERNAL_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.[a-z0-9]{1,5}")
_INLINE_IMAGE_RE = re.compile(
    r"!\[(?P<alt>[^\]]*)\]\(\s*"
    r"(?:<(?P<angled>https?://[^\s<>]+)>|(?P<url>https?://[^\s)]+))"
    r"(?P<title>\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)",
    re.IGNORECASE,
)


def is_external(value: str) -> bool:
    return bool(_EXTERNAL_URL_RE.match(value.strip()))


def extension_for(url: str) -> str:
    try:
        suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    except ValueError:
        return DEFAULT_EXTENSION
    if _EXTENSION_RE.fullmatch(suffix):
        return suffix
    return DEFAULT_EXTENSION


@dataclass(frozen=True)
class FetchResult:
    url: str
    destination: Path
    saved: bool
    final_url: str | None = None
    http_status: int | None = None
    error_message: str | None = None


class _NoRedirectHandler(HTTPRedirectHandler):
    """Surface 3xx responses as `HTTPError` so hops can be counted."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        return None


def build_http_opener() -> OpenerDirector:
    """Opener that speaks HTTP(S) only; `file:`, `ftp:` and `data:` URLs fail as unknown."""
    opener = OpenerDirector()
    for handler in (
        ProxyHandler(),
        UnknownHandler(),
        HTTPHandler(),
        HTTPSHandler(),
        HTTPDefaultErrorHandler(),
        _NoRedirectHandler(),
        HTTPErrorProcessor(),
    ):
        opener.add_handler(handler)
    return opener


class ImageFetcher:
    """Downloads one image to a file, following redirects up to a ceiling."""

    def __init__(
        self,
        *,
        timeout_seconds: float,
        max_redirects: int,
        user_agent: str,
        opener: OpenerDirector | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._max_redirects = max_redirects
        self._user_agent = user_agent
        self._opener = opener or build_http_opener()

    def fetch(self, url: str, destination: Path) -> FetchResult:
        current_url = url
        for _hop in range(self._max_redirects + 1):
            request = Request(
                current_url,
                headers={"Accept": "image/*", "User-Agent": self._user_agent},
                method="GET",
            )
            try:
                with self._opener.open(request, timeout=self._timeout_seconds) as response:
                    status = getattr(response, "status", None)
                    content_type = response.headers.get("Content-Type", "") or ""
                    if not content_type.strip().lower().startswith(IMAGE_CONTENT_TYPE_PREFIX):
                        return self._failed(
                            url,
                            destination,
                            http_status=status,
                            error_message=f"unexpected_content_type:{content_type or 'missing'}",
                        )
                    with open(destination, "wb") as f:
                        shutil.copyfileobj(response, f)
                    return FetchResult(
                        url=url,
                        destination=destination,
                        saved=True,
                        final_url=current_url,
                        http_status=status,
                    )
            except HTTPError as exc:
                location = exc.headers.get("Location") if exc.headers is not None else None
                exc.close()
                if 300 <= exc.code < 400 and location:
                    current_url = urljoin(current_url, location)
                    if not is_external(current_url):
                        return self._failed(
                            url,
                            destination,
                            http_status=exc.code,
                            error_message="unsupported_redirect_scheme",
                        )
                    continue
                return self._failed(
                    url,
                    destination,
                    http_status=exc.code,
                    error_message=f"http_{exc.code}",
                )
            except (URLError, TimeoutError, OSError, ValueError) as exc:
                return self._failed(
                    url,
                    destination,
                    error_message=f"network_error:{type(exc).__name__}",
                )
        return self._failed(url, destination, error_message="too_many_redirects")

    def _failed(
        self,
        url: str,
        destination: Path,
        *,
        error_message: str,
        http_status: int | None = None,
    ) -> FetchResult:
        try:
            destination.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("could not remove partial download path=%s error=%s", destination, exc)
        LOGGER.warning(
            "image download failed url=%s destination=%s status=%s error=%s",
            url,
            destination.name,
            http_status,
            error_message,
        )
        return FetchResult(
            url=url,
            destination=destination,
            saved=False,
            http_status=http_status,
            error_message=error_message,
        )


@dataclass
class DownloadBatch:
    """Downloads started for one document.

    Filenames are reserved on the calling thread before the fetch is submitted,
    so concurrent fetches can never be handed the same name.
    """

    bundle_dir: Path
    fetcher: ImageFetcher
    executor: Executor
    used_names: set[str] = field(default_factory=set)
    pending: list[Future[FetchResult]] = field(default_factory=list)

    def reserve(self, stem: str, extension: str, *, numbered: bool = False) -> str:
        if not numbered:
            name = f"{stem}{extension}"
            self.used_names.add(name)
            return name
        counter = 1
        while f"{stem}-{counter}{extension}" in self.used_names:
            counter += 1
        name = f"{stem}-{counter}{extension}"
        self.used_names.add(name)
        return name

    def submit(self, url: str, filename: str) -> Future[FetchResult]:
        future = self.executor.submit(self.fetcher.fetch, url, self.bundle_dir / filename)
        self.pending.append(future)
        return future

    def settle(self) -> list[FetchResult | None]:
        """Wait for every download; a crashed download yields `None` in its slot."""
        wait(self.pending)
        results: list[FetchResult | None] = []
        for future in self.pending:
            exc = future.exception()
            if exc is not None:
                LOGGER.warning("image download crashed error=%r", exc)
                results.append(None)
            else:
                results.append(future.result())
        return results


def _saved(future: Future[FetchResult]) -> bool:
    return future.exception() is None and future.result().saved


def queue_single_image(
    batch: DownloadBatch,
    url: str,
    stem: str,
) -> tuple[str, Future[FetchResult]]:
    filename = batch.reserve(stem, extension_for(url))
    return filename, batch.submit(url.strip(), filename)


def queue_gallery(
    batch: DownloadBatch,
    entries: list[str],
) -> list[tuple[int, str, Future[FetchResult]]]:
    """Queue every external entry as `gallery-<n>`; `n` counts external entries only."""
    queued: list[tuple[int, str, Future[FetchResult]]] = []
    position = 0
    for index, entry in enumerate(entries):
        if not is_external(entry):
            continue
        position += 1
        filename = batch.reserve(f"gallery-{position}", extension_for(entry))
        queued.append((index, filename, batch.submit(entry.strip(), filename)))
    return queued


def rewrite_inline_images(batch: DownloadBatch, text: str) -> str:
    """Point every remote inline image at `image-<n>.<ext>` and start its download.

    Both `![alt](url "title")` and `![alt](<url>)` forms are recognised; the title may
    use any CommonMark delimiter.

    The text is rewritten before the download outcome is known; a failed download
    leaves the document referencing a file that does not exist.
    """

    def _replace(match: re.Match[str]) -> str:
        url = match.group("angled") or match.group("url")
        filename = batch.reserve("image", extension_for(url), numbered=True)
        batch.submit(url, filename)
        return f"![{match.group('alt')}]({filename}{match.group('title') or ''})"

    return _INLINE_IMAGE_RE.sub(_replace, text)


@dataclass(frozen=True)
class MaterializeReport:
    attempted: int
    saved: int

    @property
    def failed(self) -> int:
        return self.attempted - self.saved


class AssetMaterializer:
    def __init__(self, fetcher: ImageFetcher, *, max_workers: int = 4) -> None:
        self._fetcher = fetcher
        self._max_workers = max_workers

    def materialize(self, record: ContentRecord, bundle_dir: Path) -> MaterializeReport:
        """Download the record's remote images into `bundle_dir` and rewrite references.

        Single images and gallery entries only switch to their local name once the
        download succeeded. Inline body images are rewritten up front.
        """
        bundle_dir.mkdir(parents=True, exist_ok=True)
        image_field = record.image_field
        image_url = getattr(record, image_field) if image_field else ""
        gallery = record.gallery_items

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="issue-publisher-download",
        ) as executor:
            batch = DownloadBatch(bundle_dir=bundle_dir, fetcher=self._fetcher, executor=executor)

            image_job: tuple[str, Future[FetchResult]] | None = None
            if image_field and is_external(image_url):
                image_job = queue_single_image(batch, image_url, record.image_stem)

            gallery_jobs = queue_gallery(batch, gallery) if gallery else []
            record.content = rewrite_inline_images(batch, record.content)

            results = batch.settle()

        if image_job is not None and image_field and _saved(image_job[1]):
            setattr(record, image_field, image_job[0])
        if gallery is not None:
            for index, filename, future in gallery_jobs:
                if _saved(future):
                    gallery[index] = filename

        report = MaterializeReport(
            attempted=len(results),
            saved=sum(1 for result in results if result is not None and result.saved),
        )
        if report.attempted:
            LOGGER.info(
                "images materialized attempted=%s saved=%s failed=%s bundle=%s",
                report.attempted,
                report.saved,
                report.failed,
                bundle_dir,
            )
        return report
