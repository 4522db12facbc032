from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any

from .models import CoreInfo, Duration, Failure, Service


_TAG_RE = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\s*\}\}")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z])(?=[A-Z0-9])|(?<=[0-9])(?=[A-Z])")


class TemplateError(ValueError):
    pass


def camel_to_snake(name: str) -> str:
    """
    FailuresLast24Hours -> failures_last_24_hours
    """
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S %z").strip()
    if isinstance(value, Duration):
        return value.human
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _lookup(obj: Any, segment: str, path: str) -> Any:
    if segment.startswith("_"):
        raise TemplateError(f"Invalid placeholder segment {segment!r} in {{{{.{path}}}}}")
    for attr in (segment, camel_to_snake(segment)):
        if hasattr(obj, attr):
            return getattr(obj, attr)
    raise TemplateError(f"Unknown field {segment!r} in {{{{.{path}}}}} for {type(obj).__name__}")


class TemplateRenderer:
    """
    通知模板渲染：把 `{{.Service.Name}}` 形式的占位符替换为上下文中的值。

    约定：
    - 根节点只有 Service / Failure / Core 三个
    - 后续每一段按属性名解析，先精确匹配，再尝试 CamelCase -> snake_case
    - escape_json=True 时，值按 JSON 字符串内容转义，保证渲染结果仍是合法 JSON
    - 未知字段、未闭合的 `{{` 直接抛 TemplateError，不发送半成品
    """

    def __init__(self, core: CoreInfo, *, escape_json: bool = True) -> None:
        self._core = core
        self._escape_json = escape_json

    def render(self, template: str, service: Service, failure: Failure) -> str:
        roots: dict[str, Any] = {"Service": service, "Failure": failure, "Core": self._core}

        def _replace(m: re.Match[str]) -> str:
            path = m.group(1)
            head, *rest = path.split(".")
            if head not in roots:
                raise TemplateError(f"Unknown placeholder root {head!r} in {{{{.{path}}}}}")
            value = roots[head]
            for segment in rest:
                value = _lookup(value, segment, path)
            text = format_value(value)
            if self._escape_json:
                text = json.dumps(text, ensure_ascii=False)[1:-1]
            return text

        leftover = _TAG_RE.sub("", template)
        if "{{" in leftover:
            idx = leftover.index("{{")
            raise TemplateError(f"Malformed template tag near: {leftover[idx:idx + 40]!r}")
        return _TAG_RE.sub(_replace, template)
