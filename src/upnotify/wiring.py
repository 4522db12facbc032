from __future__ import annotations

from datetime import timedelta

from .config import AppConfig
from .http_utils import HttpClient
from .notify.discord import DISCORD_DESCRIPTOR, DiscordNotifier
from .templating import TemplateRenderer


def build_discord_notifier(config: AppConfig) -> DiscordNotifier | None:
    """
    根据配置装配 Discord 通知渠道。

    - 默认描述（DISCORD_DESCRIPTOR）不被修改，用户配置通过 with_values 生成新描述
    - webhook URL 只从环境变量读取，避免落盘
    - 未配置或 enabled=false 时返回 None
    """
    dc = config.discord
    if dc is None or not dc.enabled:
        return None

    descriptor = DISCORD_DESCRIPTOR.with_values(
        host=config.resolve_env(dc.host_env) or "",
        success_data=dc.success_data,
        failure_data=dc.failure_data,
        delay=timedelta(seconds=dc.delay_seconds) if dc.delay_seconds is not None else None,
        limits=dc.limits,
    )
    return DiscordNotifier(
        descriptor=descriptor,
        http=HttpClient(verify_ssl=config.http.verify_ssl),
        renderer=TemplateRenderer(config.core, escape_json=descriptor.data_type == "json"),
    )
