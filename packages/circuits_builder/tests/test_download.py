import errno

import pytest
import requests

from circuits_builder.errors import BuildError
from circuits_builder.utils import download

URL = "https://example.invalid/powersOfTau28_hez_final_17.ptau"


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size=None):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


def _serve(monkeypatch, response):
    seen = {}

    def fake_get(url, **kwargs):
        seen["url"] = url
        seen.update(kwargs)
        return response

    monkeypatch.setattr(download.requests, "get", fake_get)
    return seen


def test_download_writes_destination(tmp_path, monkeypatch):
    seen = _serve(monkeypatch, FakeResponse([b"pt", b"", b"au"]))
    dest = tmp_path / "cache" / "file.ptau"

    assert download.download_file(URL, dest) == dest

    assert dest.read_bytes() == b"ptau"
    assert not (tmp_path / "cache" / "file.ptau.part").exists()
    assert seen["stream"] is True
    assert seen["timeout"] == download.DOWNLOAD_TIMEOUT


def test_http_error_leaves_nothing_behind(tmp_path, monkeypatch):
    _serve(monkeypatch, FakeResponse([], status=404))
    dest = tmp_path / "file.ptau"
    with pytest.raises(BuildError, match="Download failed"):
        download.download_file(URL, dest)
    assert list(tmp_path.iterdir()) == []


def test_write_error_removes_partial_file(tmp_path, monkeypatch):
    full = OSError(errno.ENOSPC, "No space left on device")
    _serve(monkeypatch, FakeResponse([b"partial", full]))
    dest = tmp_path / "file.ptau"

    with pytest.raises(BuildError, match="No space left on device"):
        download.download_file(URL, dest)

    assert not dest.exists()
    assert not (tmp_path / "file.ptau.part").exists()
