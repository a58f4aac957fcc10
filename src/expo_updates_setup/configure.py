"""
`expo-updates` 配置编排流程。

状态流转：
  IDLE -> CONFIGURING -> AWAITING_VCS -> DONE | FAILED

- 项目未依赖 `expo-updates` 时直接结束（DONE），不做任何修改。
- 编辑器抛出的异常原样上抛（FAILED），已写入的文件保留；所有修改都是幂等的，
  修复问题后重新执行即可收敛到同一结果。
- 编辑完成后检查 git 工作区；不干净时引导用户审阅并提交，用户中止则 FAILED。
"""

from __future__ import annotations

import enum
from collections.abc import Callable

from . import git
from .android import configure_updates_android
from .errors import DirtyGitTreeError, DirtyTreeAbortedError
from .ios import configure_updates_ios
from .project_config import (
    build_update_url,
    get_runtime_version,
    get_sdk_version,
    get_slug,
    has_dependency,
    read_app_config,
    read_package_json,
    resolve_username,
)
from .types import Platform, UpdateConfig


class ConfigureState(enum.Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    AWAITING_VCS = "awaiting_vcs"
    DONE = "done"
    FAILED = "failed"


_EDITORS: dict[Platform, Callable[..., list[str]]] = {
    Platform.ANDROID: configure_updates_android,
    Platform.IOS: configure_updates_ios,
}


def _log_step(message: str) -> None:
    print(f"[expo-updates-setup] {message}")


def resolve_update_config(project_dir: str, *, username: str = "") -> UpdateConfig:
    """根据 app 配置与当前用户计算需要写入的版本选择器与更新地址。"""
    exp = read_app_config(project_dir)
    return UpdateConfig(
        sdk_version=get_sdk_version(project_dir, exp),
        runtime_version=get_runtime_version(exp),
        update_url=build_update_url(resolve_username(username), get_slug(exp)),
    )


def apply_platform_config(
    project_dir: str, platform: Platform, config: UpdateConfig, *, verbose: bool = False
) -> list[str]:
    return _EDITORS[platform](project_dir, config, verbose=verbose)


class UpdatesConfigurator:
    """一次配置执行；`state` 记录当前所处阶段。"""

    def __init__(
        self,
        project_dir: str,
        platform: Platform,
        *,
        non_interactive: bool = False,
        username: str = "",
        verbose: bool = False,
    ) -> None:
        self.project_dir = project_dir
        self.platform = platform
        self.non_interactive = non_interactive
        self.username = username
        self.verbose = verbose
        self.state = ConfigureState.IDLE
        self.changed_paths: list[str] = []

    def run(self) -> ConfigureState:
        """执行到终止状态并返回；失败时先置为 FAILED 再抛出异常。"""
        if not has_dependency(read_package_json(self.project_dir)):
            _log_step("expo-updates is not installed, skipping")
            self.state = ConfigureState.DONE
            return self.state

        name = self.platform.display_name
        self.state = ConfigureState.CONFIGURING
        _log_step(f"Configuring expo-updates for {name}")
        try:
            config = resolve_update_config(self.project_dir, username=self.username)
            self.changed_paths = apply_platform_config(
                self.project_dir, self.platform, config, verbose=self.verbose
            )
        except Exception:
            self.state = ConfigureState.FAILED
            _log_step(f"✖ Configuring expo-updates for {name} failed")
            raise
        if self.verbose:
            for path in self.changed_paths:
                print(f"Changed: {path}")

        self.state = ConfigureState.AWAITING_VCS
        try:
            self._settle_vcs(name)
        except Exception:
            self.state = ConfigureState.FAILED
            _log_step(f"✖ Configuring expo-updates for {name} failed")
            raise
        self.state = ConfigureState.DONE
        return self.state

    def _settle_vcs(self, name: str) -> None:
        try:
            git.ensure_git_status_is_clean(cwd=self.project_dir, verbose=self.verbose)
        except DirtyGitTreeError:
            pass
        else:
            _log_step(f"✔ Configured expo-updates for {name}")
            return

        _log_step(f"✔ We configured expo-updates in your project for {name}")
        print()
        try:
            git.review_and_commit_changes(
                f"Configure expo-updates for {name}",
                non_interactive=self.non_interactive,
                cwd=self.project_dir,
                verbose=self.verbose,
            )
        except DirtyTreeAbortedError as e:
            raise DirtyTreeAbortedError(
                "Aborting, run the command again once you're ready. "
                "Make sure to commit any changes you've made."
            ) from e
        _log_step("✔ Successfully committed the configuration changes.")


def configure_updates(
    project_dir: str,
    platform: Platform,
    *,
    non_interactive: bool = False,
    username: str = "",
    verbose: bool = False,
) -> ConfigureState:
    """为指定平台配置 `expo-updates`，返回终止状态；失败时抛出异常。"""
    return UpdatesConfigurator(
        project_dir,
        platform,
        non_interactive=non_interactive,
        username=username,
        verbose=verbose,
    ).run()
