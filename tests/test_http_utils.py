import io
import os
import ssl
import sys
import unittest
import urllib.error
from unittest import mock


sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))


from upnotify.http_utils import HttpClient, HttpResponse  # noqa: E402


class _FakeResponse:
    def __init__(self, body: bytes) -> None:
        self.status = 200
        self.headers = {"Content-Type": "application/json"}
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None


class TestHttpUtils(unittest.TestCase):
    def test_response_text_and_json(self) -> None:
        resp = HttpResponse(status=200, url="https://x", headers={}, body=b'{"a": 1}')
        self.assertEqual(resp.text(), '{"a": 1}')
        self.assertEqual(resp.json(), {"a": 1})

    def test_post_sends_body_and_content_type(self) -> None:
        with mock.patch("urllib.request.urlopen", return_value=_FakeResponse(b"ok")) as urlopen:
            resp = HttpClient(timeout_seconds=3).post("https://example.com/hook", b"{}")

        self.assertEqual(resp.status, 200)
        self.assertEqual(resp.body, b"ok")
        self.assertEqual(resp.headers["Content-Type"], "application/json")
        req = urlopen.call_args.args[0]
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(req.data, b"{}")
        self.assertEqual(req.get_header("Content-type"), "application/json")
        self.assertIsNone(req.get_header("User-agent"))
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 3)

    def test_post_timeout_override(self) -> None:
        with mock.patch("urllib.request.urlopen", return_value=_FakeResponse(b"")) as urlopen:
            HttpClient(timeout_seconds=3).post("https://example.com/hook", b"{}", timeout_seconds=10)
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 10)

    def test_http_error_becomes_response(self) -> None:
        err = urllib.error.HTTPError("https://example.com/hook", 400, "Bad Request", None, io.BytesIO(b'{"code": 50006}'))
        with mock.patch("urllib.request.urlopen", side_effect=err):
            resp = HttpClient().post("https://example.com/hook", b"{}")
        self.assertEqual(resp.status, 400)
        self.assertEqual(resp.body, b'{"code": 50006}')

    def test_network_error_propagates(self) -> None:
        with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
            with self.assertRaises(urllib.error.URLError):
                HttpClient().post("https://example.com/hook", b"{}")

    def test_tls_verification_toggle(self) -> None:
        with mock.patch("urllib.request.urlopen", return_value=_FakeResponse(b"")) as urlopen:
            HttpClient().post("https://example.com/hook", b"{}")
        ctx = urlopen.call_args.kwargs["context"]
        self.assertEqual(ctx.verify_mode, ssl.CERT_REQUIRED)
        self.assertTrue(ctx.check_hostname)

        with mock.patch("urllib.request.urlopen", return_value=_FakeResponse(b"")) as urlopen:
            HttpClient(verify_ssl=False).post("https://example.com/hook", b"{}")
        ctx = urlopen.call_args.kwargs["context"]
        self.assertEqual(ctx.verify_mode, ssl.CERT_NONE)
        self.assertFalse(ctx.check_hostname)
