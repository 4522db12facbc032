"""
Uptime Notify (upnotify)

监控系统的 Discord webhook 通知渠道：服务宕机 / 恢复时渲染 JSON 模板并 POST 到用户配置的
webhook URL，同时提供设置页面使用的连通性测试。
"""

from .models import CoreInfo, Duration, Failure, Service

__all__ = [
    "CoreInfo",
    "Duration",
    "Failure",
    "Service",
]
