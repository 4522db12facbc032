from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Protocol

from ..http_utils import HttpClient
from ..models import Failure, Service
from .base import FormField, Notifier, NotifierDescriptor, WebhookTestError


logger = logging.getLogger(__name__)

SEND_TIMEOUT_SECONDS = 10.0
TEST_MESSAGE = '{"content": "Testing the discord notifier"}'
TEST_ERROR_MESSAGE = "incorrect URL, please confirm URL is correct"


class PayloadRenderer(Protocol):
    def render(self, template: str, service: Service, failure: Failure) -> str: ...


_AVATAR = "https://avatars1.githubusercontent.com/u/61949049?s=200&v=4"

SUCCESS_TEMPLATE = """{
  "embeds": [
    {
      "title": "{{.Service.Name}} is back up",
      "description": "Your service ['{{.Service.Name}}']({{.Service.Domain}}) is currently back online and was down for {{.Service.Downtime.Human}}.",
      "url": "{{.Service.Domain}}",
      "color": 8311585,
      "footer": {
        "icon_url": "%(avatar)s",
        "text": "Statping Version {{.Core.Version}}"
      },
      "author": {
        "name": "{{.Core.Name}}",
        "url": "{{.Core.Domain}}",
        "icon_url": "%(avatar)s"
      },
      "thumbnail": {
        "url": "%(avatar)s"
      },
      "fields": [
        {
          "name": "Last Online",
          "value": "{{.Service.LastOnline}}",
          "inline": true
        },
        {
          "name": "Last Offline",
          "value": "{{.Service.LastOffline}}",
          "inline": true
        },
        {
          "name": "Failures 24 Hours",
          "value": "{{.Service.FailuresLast24Hours}}",
          "inline": true
        }
      ]
    }
  ]
}""" % {"avatar": _AVATAR}

FAILURE_TEMPLATE = """{
  "embeds": [
    {
      "title": "Your service '{{.Service.Name}}' is failing",
      "description": "Your service ['{{.Service.Name}}']({{.Service.Domain}}) is currently offline for {{.Service.Downtime.Human}}!",
      "url": "{{.Service.Domain}}",
      "color": 13632027,
      "footer": {
        "icon_url": "%(avatar)s",
        "text": "Statping Version {{.Core.Version}}"
      },
      "author": {
        "name": "{{.Core.Name}}",
        "url": "{{.Core.Domain}}",
        "icon_url": "%(avatar)s"
      },
      "thumbnail": {
        "url": "%(avatar)s"
      },
      "fields": [
        {
          "name": "Downtime Start",
          "value": "{{.Failure.DowntimeAgo}}"
        },
        {
          "name": "Reason",
          "value": "{{.Failure.Issue}}",
          "inline": true
        },
        {
          "name": "Ping",
          "value": "{{.Failure.PingTime}}",
          "inline": true
        },
        {
          "name": "Failures 24 Hours",
          "value": "{{.Service.FailuresLast24Hours}}",
          "inline": true
        }
      ]
    }
  ]
}""" % {"avatar": _AVATAR}

DISCORD_DESCRIPTOR = NotifierDescriptor(
    method="discord",
    title="Discord",
    description=(
        "Send notifications to your discord channel using discord webhooks. "
        "Insert your discord channel Webhook URL to receive notifications. "
        'Based on the <a href="https://discordapp.com/developers/docs/resources/Webhook">discord webhooker API</a>.'
    ),
    author="Hunter Long",
    author_url="https://github.com/hunterlong",
    icon="fab fa-discord",
    delay=timedelta(seconds=5),
    limits=60,
    data_type="json",
    success_data=SUCCESS_TEMPLATE,
    failure_data=FAILURE_TEMPLATE,
    form=(
        FormField(
            type="text",
            title="discord webhooker URL",
            placeholder="https://discordapp.com/api/webhooks/****/*****",
            db_field="host",
        ),
    ),
)


@dataclass(slots=True)
class DiscordNotifier(Notifier):
    """
    Discord webhook 通知渠道。

    说明：
    - descriptor.host 即 webhook URL（URL 内含 token，不做额外鉴权）
    - 每次调用只发一次 POST，超时 10s，不重试
    - 返回值是 Discord 的原始响应文本；传输层异常原样抛出
    """

    descriptor: NotifierDescriptor
    http: HttpClient
    renderer: PayloadRenderer

    def select(self) -> NotifierDescriptor:
        return self.descriptor

    def validate(self, values: Mapping[str, Any] | None) -> None:
        # 有意不校验：任何输入（包括空配置）都接受
        return None

    def on_failure(self, service: Service, failure: Failure) -> str:
        msg = self.renderer.render(self.descriptor.failure_data, service, failure)
        return self._send(msg)

    def on_success(self, service: Service) -> str:
        msg = self.renderer.render(self.descriptor.success_data, service, Failure())
        return self._send(msg)

    def on_save(self) -> str:
        return ""

    def on_test(self) -> str:
        """
        发送固定测试消息并解释响应：

        - body 为空：视为成功（Discord 成功时返回 204 无 body）
        - body 不能解析为 {code:int, message:str}：抛 WebhookTestError，附原始 body
        - 解析成功但 code 缺失或为 0：同样视为 URL 错误
        - 其余情况返回原始 body
        """
        resp = self.http.post(
            self.descriptor.host,
            TEST_MESSAGE.encode("utf-8"),
            content_type="application/json",
            timeout_seconds=SEND_TIMEOUT_SECONDS,
        )
        contents = resp.text()
        logger.debug("discord test response: status=%d bytes=%d", resp.status, len(resp.body))
        if contents == "":
            return ""

        code = _decode_test_code(contents)
        if code is None or code == 0:
            raise WebhookTestError(TEST_ERROR_MESSAGE, body=contents)
        return contents

    def _send(self, msg: str) -> str:
        data = msg.encode("utf-8")
        resp = self.http.post(
            self.descriptor.host,
            data,
            content_type="application/json",
            timeout_seconds=SEND_TIMEOUT_SECONDS,
        )
        logger.debug("discord send: payload_bytes=%d status=%d", len(data), resp.status)
        return resp.text()


def _decode_test_code(contents: str) -> int | None:
    """
    按 {code:int, message:str} 解析测试响应，返回 code；形状不符时返回 None。

    缺失的 code 视为 0。
    """
    try:
        data = json.loads(contents)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    code = _get_field(data, "code")
    message = _get_field(data, "message")
    if message is not None and not isinstance(message, str):
        return None
    if code is None:
        return 0
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    return code


def _get_field(data: Mapping[str, Any], name: str) -> Any:
    """
    取字段：优先精确匹配，其次忽略大小写匹配（{"Code": 7} 与 {"code": 7} 等价）。
    """
    if name in data:
        return data[name]
    for key, value in data.items():
        if isinstance(key, str) and key.casefold() == name.casefold():
            return value
    return None
