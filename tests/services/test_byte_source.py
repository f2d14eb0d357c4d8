import urllib.error

import pytest

from audio_timeline.domain.errors import TransportError
from audio_timeline.services import byte_source


def test_read_file_bytes(tmp_path):
    path = tmp_path / "clip.bin"
    path.write_bytes(b"RIFF1234")

    assert byte_source.read_source_bytes(str(path)) == b"RIFF1234"


def test_missing_file_is_a_transport_error(tmp_path):
    with pytest.raises(TransportError):
        byte_source.read_file_bytes(tmp_path / "missing.wav")


def test_urls_are_detected():
    assert byte_source.is_url("https://example.com/a.wav")
    assert byte_source.is_url("HTTP://example.com/a.wav")
    assert not byte_source.is_url("/tmp/a.wav")


def test_http_error_is_a_transport_error(monkeypatch):
    def refuse(url, timeout):
        raise urllib.error.HTTPError(url, 404, "Not Found", None, None)

    monkeypatch.setattr(byte_source.urllib.request, "urlopen", refuse)

    with pytest.raises(TransportError, match="404"):
        byte_source.read_source_bytes("https://example.com/missing.wav")


def test_network_failure_is_a_transport_error(monkeypatch):
    def unreachable(url, timeout):
        raise urllib.error.URLError("no route to host")

    monkeypatch.setattr(byte_source.urllib.request, "urlopen", unreachable)

    with pytest.raises(TransportError):
        byte_source.fetch_url_bytes("http://example.invalid/a.wav", timeout=1)


def test_fetch_returns_body(monkeypatch):
    class Response:
        status = 200

        def read(self):
            return b"audio"

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(byte_source.urllib.request, "urlopen", lambda url, timeout: Response())

    assert byte_source.fetch_url_bytes("https://example.com/a.wav") == b"audio"
