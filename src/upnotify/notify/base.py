from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Protocol

from ..models import Failure, Service


class WebhookTestError(RuntimeError):
    """
    连通性测试失败：webhook 有响应，但响应内容表明 URL 不正确。

    body 保留原始响应文本，便于在设置页面上排查。
    """

    def __init__(self, message: str, *, body: str = "") -> None:
        super().__init__(message)
        self.body = body


@dataclass(frozen=True, slots=True)
class FormField:
    type: str
    title: str
    placeholder: str
    db_field: str


@dataclass(frozen=True, slots=True)
class NotifierDescriptor:
    """
    通知渠道描述：身份信息、设置表单、默认节流参数与两份模板。

    进程启动时构造一次默认值；用户配置通过 with_values 生成新实例，默认值本身不可变。
    delay / limits 只是声明，由宿主调度器负责执行。
    """

    method: str
    title: str
    description: str
    author: str
    author_url: str
    icon: str
    delay: timedelta
    limits: int
    data_type: str
    success_data: str
    failure_data: str
    form: tuple[FormField, ...] = ()
    host: str = ""

    def with_values(self, **overrides: Any) -> "NotifierDescriptor":
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_json_dict(self, *, redact_host: bool = True) -> dict[str, Any]:
        host = self.host
        if redact_host and host:
            host = "<redacted>"
        return {
            "method": self.method,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "author_url": self.author_url,
            "icon": self.icon,
            "delay_seconds": self.delay.total_seconds(),
            "limits": self.limits,
            "data_type": self.data_type,
            "success_data": self.success_data,
            "failure_data": self.failure_data,
            "form": [dataclasses.asdict(f) for f in self.form],
            "host": host,
        }


class Notifier(Protocol):
    """
    通知接口：所有通知渠道都实现同一组操作，由宿主的分发逻辑调用。

    约定：
    - on_failure / on_success / on_test 返回 webhook 的原始响应文本
    - 发送失败直接抛异常，不在渠道内部重试或记录日志
    - validate / on_save 不会失败
    """

    def select(self) -> NotifierDescriptor: ...

    def validate(self, values: Mapping[str, Any] | None) -> None: ...

    def on_failure(self, service: Service, failure: Failure) -> str: ...

    def on_success(self, service: Service) -> str: ...

    def on_save(self) -> str: ...

    def on_test(self) -> str: ...
