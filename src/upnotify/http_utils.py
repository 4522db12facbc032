from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    url: str
    headers: Mapping[str, str]
    body: bytes

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class HttpClient:
    """
    轻量 HTTP 客户端（仅依赖标准库），用于向 webhook 投递通知。

    策略：
    - 不重试：失败直接抛给调用方，由宿主决定是否重发
    - 4xx/5xx 不视为异常，按普通响应返回 status 与 body
    - 网络错误 / 超时 / 非法 URL 原样抛出（URLError / TimeoutError / ValueError）
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        verify_ssl: bool = True,
        user_agent: str | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._ssl_context = ssl.create_default_context() if verify_ssl else ssl._create_unverified_context()

    def post(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str = "application/json",
        timeout_seconds: float | None = None,
    ) -> HttpResponse:
        headers = {"Content-Type": content_type}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        timeout = self._timeout_seconds if timeout_seconds is None else timeout_seconds
        req = urllib.request.Request(url=url, data=data, headers=headers, method="POST")
        try:
            with urllib.request.urlopen(req, timeout=timeout, context=self._ssl_context) as resp:  # noqa: S310
                return HttpResponse(
                    status=getattr(resp, "status", 200),
                    url=url,
                    headers={k: v for k, v in resp.headers.items()} if getattr(resp, "headers", None) else {},
                    body=resp.read(),
                )
        except urllib.error.HTTPError as e:
            # webhook 的错误信封在 body 里，交给上层解释
            body = e.read() if e.fp is not None else b""
            return HttpResponse(
                status=e.code,
                url=url,
                headers={k: v for k, v in e.headers.items()} if e.headers else {},
                body=body or b"",
            )
