import asyncio
import io
from types import SimpleNamespace

import pytest
from PIL import Image

from core.compression.format import ImageFormat, detect_image
from core.exceptions import DownloadError
from core.source_acquirer import MessageImageAcquirer


def _png_bytes(size=(64, 48)):
    buf = io.BytesIO()
    Image.new("RGB", size, (0, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


class FakeDownloader:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.urls = []

    async def download_image(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.content


def test_detect_image_reads_format_and_size():
    assert detect_image(_png_bytes()) == (ImageFormat.PNG, 64, 48)


def test_detect_image_unknown_content():
    assert detect_image(b"garbage") == (ImageFormat.UNKNOWN, None, None)


def test_acquire_from_url(tmp_path):
    downloader = FakeDownloader(content=_png_bytes())
    acquirer = MessageImageAcquirer(
        [SimpleNamespace(url="http://example.com/a.png", file=None)],
        downloader,
        tmp_path,
    )

    source = asyncio.run(acquirer.acquire())

    assert downloader.urls == ["http://example.com/a.png"]
    assert (source.width, source.height) == (64, 48)
    assert source.uri.endswith(".png")
    assert (tmp_path / source.uri.split("/")[-1]).exists()


def test_acquire_from_local_file(tmp_path):
    local = tmp_path / "local.png"
    local.write_bytes(_png_bytes(size=(5, 7)))
    acquirer = MessageImageAcquirer(
        [SimpleNamespace(url="", file=local.as_uri())],
        FakeDownloader(),
        tmp_path / "work",
    )

    source = asyncio.run(acquirer.acquire())

    assert (source.width, source.height) == (5, 7)


def test_unknown_content_has_unknown_dimensions(tmp_path):
    acquirer = MessageImageAcquirer(
        [SimpleNamespace(url="http://example.com/x", file=None)],
        FakeDownloader(content=b"not decodable"),
        tmp_path,
    )

    source = asyncio.run(acquirer.acquire())

    assert source.width is None and source.height is None


def test_no_images_returns_none(tmp_path):
    acquirer = MessageImageAcquirer([], FakeDownloader(), tmp_path)
    assert asyncio.run(acquirer.acquire()) is None


def test_skips_unreadable_images(tmp_path):
    acquirer = MessageImageAcquirer(
        [
            SimpleNamespace(url=None, file=str(tmp_path / "missing.png")),
            SimpleNamespace(url="http://example.com/b.png", file=None),
        ],
        FakeDownloader(content=_png_bytes()),
        tmp_path,
    )

    assert asyncio.run(acquirer.acquire()).width == 64


def test_download_error_propagates(tmp_path):
    acquirer = MessageImageAcquirer(
        [SimpleNamespace(url="http://example.com/c.png", file=None)],
        FakeDownloader(error=DownloadError("timeout")),
        tmp_path,
    )

    with pytest.raises(DownloadError):
        asyncio.run(acquirer.acquire())
