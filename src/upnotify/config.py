from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Mapping

from .models import CoreInfo


def _require_dict(value: Any, *, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"Expected object at {where}, got {type(value)}")
    return value


def _get_bool(d: Mapping[str, Any], key: str, default: bool) -> bool:
    v = d.get(key, default)
    return bool(v)


def _get_int(d: Mapping[str, Any], key: str, default: int) -> int:
    v = d.get(key, default)
    if isinstance(v, bool):
        return default
    try:
        return int(v)
    except Exception:
        return default


def _get_float(d: Mapping[str, Any], key: str, default: float) -> float:
    v = d.get(key, default)
    if isinstance(v, bool):
        return default
    try:
        return float(v)
    except Exception:
        return default


def _get_str(d: Mapping[str, Any], key: str, default: str | None = None) -> str | None:
    v = d.get(key, default)
    if v is None:
        return None
    return str(v)


@dataclass(frozen=True, slots=True)
class HttpConfig:
    verify_ssl: bool = True


@dataclass(frozen=True, slots=True)
class DiscordNotifyConfig:
    """
    Discord webhook 通知配置。

    host_env:
      - webhook URL 的环境变量名（URL 自带 token，不写入配置文件）
    success_data / failure_data:
      - 覆盖默认模板；不配置则使用内置模板
    delay_seconds / limits:
      - 发送间隔与频率上限，仅作声明，由宿主调度执行
    """

    host_env: str
    enabled: bool = True
    success_data: str | None = None
    failure_data: str | None = None
    delay_seconds: float | None = None
    limits: int | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    core: CoreInfo
    http: HttpConfig
    discord: DiscordNotifyConfig | None

    def resolve_env(self, env_name: str | None) -> str | None:
        if not env_name:
            return None
        return os.environ.get(env_name)


def load_config(config_path: str) -> AppConfig:
    """
    使用 JSON 作为配置落地形式。

    JSON 顶层结构（示意）：
    {
      "core": { "name": "Statping", "domain": "https://status.example.com", "version": "0.90" },
      "http": { "verify_ssl": true },
      "notifiers": { "discord": { "host_env": "DISCORD_WEBHOOK_URL" } }
    }
    """
    with open(config_path, "rb") as f:
        raw = json.loads(f.read().decode("utf-8"))

    root = _require_dict(raw, where="$")

    core = _require_dict(root.get("core", {}), where="$.core")
    core_cfg = CoreInfo(
        name=_get_str(core, "name", "Statping") or "Statping",
        domain=_get_str(core, "domain", "") or "",
        version=_get_str(core, "version", "") or "",
    )

    http = _require_dict(root.get("http", {}), where="$.http")
    http_cfg = HttpConfig(
        verify_ssl=_get_bool(http, "verify_ssl", True),
    )

    notifiers = _require_dict(root.get("notifiers", {}), where="$.notifiers")

    discord_cfg: DiscordNotifyConfig | None = None
    if isinstance(notifiers.get("discord"), dict):
        dc = _require_dict(notifiers["discord"], where="$.notifiers.discord")
        delay = dc.get("delay_seconds")
        limits = dc.get("limits")
        discord_cfg = DiscordNotifyConfig(
            host_env=str(dc.get("host_env") or "DISCORD_WEBHOOK_URL"),
            enabled=_get_bool(dc, "enabled", True),
            success_data=_get_str(dc, "success_data", None),
            failure_data=_get_str(dc, "failure_data", None),
            delay_seconds=_get_float(dc, "delay_seconds", 5.0) if delay is not None else None,
            limits=_get_int(dc, "limits", 60) if limits is not None else None,
        )

    return AppConfig(core=core_cfg, http=http_cfg, discord=discord_cfg)
