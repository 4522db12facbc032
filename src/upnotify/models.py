from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Mapping


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def parse_rfc3339_datetime(value: str) -> datetime:
    """
    解析常见的 RFC3339/ISO8601 时间串为带 tzinfo 的 datetime。

    兼容：
    - 2026-02-10T12:34:56Z
    - 2026-02-10T12:34:56+00:00
    - 2026-02-10T12:34:56.123Z
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


_UNITS: tuple[tuple[str, int], ...] = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


@dataclass(frozen=True, slots=True)
class Duration:
    """
    时长包装，模板里通过 `.Human` 取可读形式。

    human 只保留最大的整单位，例如 "5 minutes"、"2 hours"、"1 day"。
    """

    value: timedelta = timedelta(0)

    @property
    def human(self) -> str:
        total = int(abs(self.value.total_seconds()))
        for name, size in _UNITS:
            if total >= size:
                n = total // size
                return f"{n} {name}" if n == 1 else f"{n} {name}s"
        return "0 seconds"

    def __str__(self) -> str:
        return self.human


@dataclass(frozen=True, slots=True)
class CoreInfo:
    """
    宿主监控系统的身份信息（模板中的 `.Core.*`）。
    """

    name: str = "Statping"
    domain: str = ""
    version: str = ""


@dataclass(frozen=True, slots=True)
class Service:
    """
    服务快照：由调用方在每次通知时构造，只读。

    字段对应模板中的 `.Service.*`：
    - last_online / last_offline 为带时区的 datetime，未知时为 None
    - failures_last_24_hours 为最近 24 小时的失败次数
    - downtime 为当前（或刚结束的）不可用时长
    """

    name: str
    domain: str = ""
    id: int = 0
    online: bool = True
    last_online: datetime | None = None
    last_offline: datetime | None = None
    failures_last_24_hours: int = 0
    downtime: Duration = field(default_factory=Duration)

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Any]) -> "Service":
        if not isinstance(data, dict):
            raise ValueError(f"Expected object for service, got {type(data)}")
        name = data.get("name")
        if not name:
            raise ValueError("service.name is required")

        def _dt(key: str) -> datetime | None:
            v = data.get(key)
            return parse_rfc3339_datetime(str(v)) if v else None

        return cls(
            name=str(name),
            domain=str(data.get("domain") or ""),
            id=int(data.get("id") or 0),
            online=bool(data.get("online", True)),
            last_online=_dt("last_online"),
            last_offline=_dt("last_offline"),
            failures_last_24_hours=int(data.get("failures_last_24_hours") or 0),
            downtime=Duration(timedelta(seconds=float(data.get("downtime_seconds") or 0))),
        )


@dataclass(frozen=True, slots=True)
class Failure:
    """
    单次失败记录（模板中的 `.Failure.*`）。

    Failure() 即零值，服务恢复时使用，所有字段渲染为空或 0。
    """

    issue: str = ""
    ping_time: float = 0.0
    created_at: datetime | None = None

    @property
    def downtime_ago(self) -> str:
        if self.created_at is None:
            return ""
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return f"{Duration(utc_now() - created_at).human} ago"
