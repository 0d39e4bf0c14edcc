"""Download images referenced by markup and anchor them next to a cell."""

from __future__ import annotations

import logging
import time
import urllib.request
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO
from urllib.error import URLError

from bs4 import Tag
from openpyxl.cell.cell import Cell
from openpyxl.drawing.image import Image

from .config import ConverterConfig
from .exceptions import ImageDownloadError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

_MAGIC_NUMBERS = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"BM", "bmp"),
)
_EXTENSIONS = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".gif": "gif",
    ".bmp": "bmp",
}

Fetch = Callable[[str, float], bytes]


def find_image_sources(root: Tag) -> list[tuple[int, str]]:
    """Return ``(index, src)`` for every ``<img>`` with a non-blank source.

    The index counts every ``<img>`` in document order, including the skipped
    ones, and decides the row offset of the picture.
    """
    sources = []
    for index, image in enumerate(root.find_all("img")):
        src = image.get("src")
        if isinstance(src, str) and src.strip():
            sources.append((index, src.strip()))
    return sources


def detect_image_type(data: bytes, src: str = "") -> str:
    """Guess the picture type from its leading bytes, then from `src`.

    Args:
        data: Raw image bytes.
        src: Image location; its extension is used when the bytes are not
            recognised.

    Returns:
        str: One of ``png``, ``jpeg``, ``gif`` or ``bmp``; ``jpeg`` when
            nothing matches.

    Examples:
        detect_image_type(b"\\x89PNG\\r\\n\\x1a\\n...")  # "png"
        detect_image_type(b"", "logo.GIF")  # "gif"
    """
    for magic, picture_type in _MAGIC_NUMBERS:
        if data.startswith(magic):
            return picture_type

    path = src.split("?", 1)[0].split("#", 1)[0].lower()
    for extension, picture_type in _EXTENSIONS.items():
        if path.endswith(extension):
            return picture_type
    return "jpeg"


def download_image(src: str, timeout: float) -> bytes:
    """Fetch `src` over HTTP(S) with a per-operation socket timeout.

    Raises:
        ImageDownloadError: If the request fails or the body is empty.
    """
    try:
        request = urllib.request.Request(src, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(request, timeout=timeout) as response:
            data = response.read()
    except (URLError, OSError, ValueError) as error:
        raise ImageDownloadError(src, str(error)) from error
    if not data:
        raise ImageDownloadError(src, "empty response")
    return data


class ImageHandler:
    """Download the images of a fragment in parallel and embed them.

    The first image is anchored at the target cell and each following one a
    row further down. Failed downloads are logged and skipped.

    Args:
        config: Supplies timeouts, pool size and the download switch.
        executor: Pool used for downloads. When omitted the handler creates
            one on first use and shuts it down in `close`.
        fetch: Callable ``(src, timeout) -> bytes``; defaults to
            `download_image`.

    Examples:
        with ImageHandler(ConverterConfig()) as images:
            images.process_images(soup, sheet["A1"])
    """

    def __init__(
        self,
        config: ConverterConfig,
        executor: Executor | None = None,
        fetch: Fetch | None = None,
    ):
        self.config = config
        self.fetch = fetch or download_image
        self._executor = executor
        self._owns_executor = executor is None

    def __enter__(self) -> ImageHandler:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.image_max_workers,
                thread_name_prefix="html2xlsx-image",
            )
        return self._executor

    def close(self) -> None:
        """Shut down the pool if this handler created it."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def process_images(self, root: Tag, cell: Cell) -> int:
        """Download every image of `root` and anchor it below `cell`.

        Args:
            root: Parsed markup.
            cell: Cell where the first picture is anchored.

        Returns:
            int: Number of pictures added to the sheet.
        """
        if not self.config.enable_image_download:
            return 0

        sources = find_image_sources(root)
        if not sources:
            return 0

        # One deadline covers every download of the fragment
        timeout = self.config.image_connect_timeout + self.config.image_read_timeout
        deadline = time.monotonic() + timeout
        futures: list[tuple[int, str, Future[bytes]]] = [
            (index, src, self.executor.submit(self.fetch, src, self.config.image_read_timeout))
            for index, src in sources
        ]

        embedded = 0
        for index, src, future in futures:
            try:
                data = self._wait(src, future, max(deadline - time.monotonic(), 0))
            except ImageDownloadError as error:
                logger.warning("%s", error)
                continue
            if self._embed(cell, index, src, data):
                embedded += 1
        return embedded

    @staticmethod
    def _wait(src: str, future: Future[bytes], timeout: float) -> bytes:
        try:
            data = future.result(timeout=timeout)
        except FutureTimeoutError as error:
            future.cancel()
            raise ImageDownloadError(src, "download timed out") from error
        except ImageDownloadError:
            raise
        except Exception as error:
            raise ImageDownloadError(src, str(error)) from error
        if not data:
            raise ImageDownloadError(src, "empty response")
        return data

    @staticmethod
    def _embed(cell: Cell, index: int, src: str, data: bytes) -> bool:
        anchor = f"{cell.column_letter}{cell.row + index}"
        try:
            image = Image(BytesIO(data))
        except (OSError, ValueError) as error:
            logger.warning("Failed to embed image from %s: %s", src, error)
            return False

        cell.parent.add_image(image, anchor)
        logger.debug(
            "Embedded %s image from %s at %s", detect_image_type(data, src), src, anchor
        )
        return True
