from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from .config import load_config
from .models import Failure, Service, utc_now
from .notify.base import WebhookTestError
from .templating import TemplateError
from .wiring import build_discord_notifier


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="upnotify", description="Uptime Notify (discord webhook channel)")
    p.add_argument("--config", required=True, help="Path to JSON config file")
    p.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG/INFO/WARNING/ERROR). Defaults to env UPN_LOG_LEVEL or INFO",
    )

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("describe", help="Print the effective notifier descriptor as JSON")
    sub.add_parser("test", help="Send the connectivity test message")

    failure = sub.add_parser("failure", help="Send the failure notification for a service")
    failure.add_argument("--service", required=True, help="Path to service snapshot JSON")
    failure.add_argument("--issue", default="", help="Failure reason")
    failure.add_argument("--ping-ms", type=float, default=0.0, help="Ping time in milliseconds")

    success = sub.add_parser("success", help="Send the recovery notification for a service")
    success.add_argument("--service", required=True, help="Path to service snapshot JSON")
    return p


def _resolve_log_level(value: str | None) -> int:
    v = (value or "").strip().upper()
    if not v:
        return logging.INFO
    level = logging.getLevelNamesMapping().get(v)
    if isinstance(level, int):
        return level
    return logging.INFO


def _load_service(path: str) -> Service:
    with open(path, "rb") as f:
        raw = json.loads(f.read().decode("utf-8"))
    return Service.from_json_dict(raw)


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    env_log_level = os.environ.get("UPN_LOG_LEVEL")
    log_level = _resolve_log_level(args.log_level or env_log_level)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger = logging.getLogger("upnotify")

    config = load_config(args.config)
    notifier = build_discord_notifier(config)
    if notifier is None:
        logger.warning("discord notifier not configured or disabled")
        return 2

    descriptor = notifier.select()
    if args.command == "describe":
        sys.stdout.write(json.dumps(descriptor.to_json_dict(), ensure_ascii=False, indent=2) + "\n")
        return 0

    if not descriptor.host:
        logger.warning("discord webhook URL is empty; set env %s", config.discord.host_env if config.discord else "-")
        return 2

    try:
        if args.command == "test":
            out = notifier.on_test()
        elif args.command == "failure":
            service = _load_service(args.service)
            failure = Failure(
                issue=args.issue,
                ping_time=args.ping_ms,
                created_at=utc_now() - service.downtime.value,
            )
            out = notifier.on_failure(service, failure)
        else:
            out = notifier.on_success(_load_service(args.service))
    except WebhookTestError as e:
        logger.error("discord test failed: %s body=%r", e, e.body[:200])
        return 1
    except TemplateError:
        logger.exception("template render failed: command=%s", args.command)
        return 1
    except (OSError, ValueError):
        logger.exception("discord %s failed", args.command)
        return 1

    logger.info("discord %s done: response_bytes=%d", args.command, len(out))
    if out:
        sys.stdout.write(out + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
