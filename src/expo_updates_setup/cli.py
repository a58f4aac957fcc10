"""
`expo-updates-setup` 的命令行入口模块。

负责收集项目目录、平台与交互参数，并调用 `expo_updates_setup.configure.configure_updates`。
"""

import argparse
import os
from collections.abc import Sequence

from .configure import configure_updates
from .errors import ConfigureError
from .types import Platform

_PLATFORM_CHOICES = ("android", "ios", "all")


def _platforms_for(value: str) -> list[Platform]:
    if value == "all":
        return [Platform.ANDROID, Platform.IOS]
    return [Platform(value)]


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `expo-updates-setup` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="expo-updates-setup",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Wire expo-updates into the native Android / iOS build of a project.\n"
            "Safe to run repeatedly: every edit is applied only once."
        ),
    )
    p.add_argument(
        "-p",
        "--platform",
        required=True,
        choices=_PLATFORM_CHOICES,
        help="Platform to configure",
    )
    p.add_argument(
        "--project-dir",
        default="",
        help="Project root containing package.json (default: current directory)",
    )
    p.add_argument(
        "--username",
        default="",
        help="Expo account username used in the update URL "
        "(default: $EXPO_USERNAME or the Expo CLI session)",
    )
    p.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; fail instead of asking to commit changes",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数并按平台依次执行配置。"""
    ns = build_parser().parse_args(argv)

    project_dir = os.path.abspath(os.path.expanduser(ns.project_dir or os.getcwd()))
    if not os.path.isdir(project_dir):
        raise SystemExit(f"Error: project directory not found: {project_dir}")

    for platform in _platforms_for(ns.platform):
        try:
            configure_updates(
                project_dir,
                platform,
                non_interactive=bool(ns.non_interactive),
                username=(ns.username or "").strip(),
                verbose=bool(ns.verbose),
            )
        except ConfigureError as e:
            raise SystemExit(f"Error: {e}") from e
        except RuntimeError as e:
            raise SystemExit(
                f"Error: failed to configure expo-updates for {platform.display_name}.\n"
                f"Detail: {e}\n"
                "Hint: fix the problem above and run the command again.\n"
            ) from e
    return 0
