"""
读取项目元数据：`package.json` 依赖、`app.json` 中的 Expo 配置、当前登录用户。
"""

from __future__ import annotations

import json
import os
from typing import Any

from .errors import AppConfigError, NotLoggedInError

UPDATES_PACKAGE = "expo-updates"


def _load_json(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise AppConfigError(f"Failed to parse {path}: {e}") from e


def read_package_json(project_dir: str) -> dict[str, Any]:
    path = os.path.join(project_dir, "package.json")
    if not os.path.isfile(path):
        raise AppConfigError(f"Couldn't find package.json at {path}")
    data = _load_json(path)
    return data if isinstance(data, dict) else {}


def has_dependency(package_json: dict[str, Any], name: str = UPDATES_PACKAGE) -> bool:
    deps = package_json.get("dependencies")
    return isinstance(deps, dict) and bool(deps.get(name))


def read_app_config(project_dir: str) -> dict[str, Any]:
    """读取 `app.json`，兼容带 `expo` 外层键与不带的两种写法。"""
    path = os.path.join(project_dir, "app.json")
    if not os.path.isfile(path):
        raise AppConfigError(f"Couldn't find app.json at {path}")
    data = _load_json(path)
    if not isinstance(data, dict):
        raise AppConfigError(f"Invalid app config in {path}")
    exp = data.get("expo", data)
    if not isinstance(exp, dict):
        raise AppConfigError(f"Invalid 'expo' section in {path}")
    return exp


def get_sdk_version(project_dir: str, exp: dict[str, Any]) -> str:
    """优先取 `sdkVersion`，否则由已安装的 `expo` 包主版本推导为 `<major>.0.0`。"""
    sdk_version = exp.get("sdkVersion")
    if isinstance(sdk_version, str) and sdk_version:
        return sdk_version

    expo_pkg = os.path.join(project_dir, "node_modules", "expo", "package.json")
    if os.path.isfile(expo_pkg):
        data = _load_json(expo_pkg)
        version = data.get("version", "") if isinstance(data, dict) else ""
        major = str(version).split(".", 1)[0]
        if major.isdigit():
            return f"{major}.0.0"
    raise AppConfigError(
        "Cannot determine which Expo SDK version your project uses. "
        "Set 'sdkVersion' in app.json or install the 'expo' package."
    )


def get_runtime_version(exp: dict[str, Any]) -> str | None:
    value = exp.get("runtimeVersion")
    if isinstance(value, str) and value:
        return value
    return None


def get_slug(exp: dict[str, Any]) -> str:
    slug = exp.get("slug")
    if not isinstance(slug, str) or not slug:
        raise AppConfigError("Missing 'slug' in app config")
    return slug


def _expo_home() -> str:
    return os.environ.get("EXPO_HOME") or os.path.join(os.path.expanduser("~"), ".expo")


def resolve_username(explicit: str = "") -> str:
    """依次尝试：显式参数、`EXPO_USERNAME`、Expo CLI 会话文件中的用户名。"""
    if explicit:
        return explicit
    env_username = os.environ.get("EXPO_USERNAME", "")
    if env_username:
        return env_username

    state_path = os.path.join(_expo_home(), "state.json")
    if os.path.isfile(state_path):
        try:
            state = _load_json(state_path)
        except AppConfigError:
            state = {}
        auth = state.get("auth") if isinstance(state, dict) else None
        if isinstance(auth, dict) and isinstance(auth.get("username"), str) and auth["username"]:
            return auth["username"]

    raise NotLoggedInError(
        "Not logged in. Pass --username, set EXPO_USERNAME, or log in with the Expo CLI."
    )


def build_update_url(username: str, slug: str) -> str:
    return f"https://exp.host/@{username}/{slug}"
