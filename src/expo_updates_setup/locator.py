"""
在任意项目目录中定位需要编辑的原生配置文件。
"""

from __future__ import annotations

import glob
import os

from .errors import ConfigFileNotFoundError, ProjectNotFoundError

IOS_PROJECT = "ios_project"
ANDROID_MANIFEST = "android_manifest"
ANDROID_BUILD_SCRIPT = "android_build_script"

_ANDROID_PATHS = {
    ANDROID_BUILD_SCRIPT: (("android", "app", "build.gradle"), "gradle build script"),
    ANDROID_MANIFEST: (
        ("android", "app", "src", "main", "AndroidManifest.xml"),
        "Android manifest",
    ),
}


def find_pbxproj(project_dir: str) -> str:
    """查找 `ios/*/project.pbxproj`，多个结果时按路径排序取第一个。"""
    pattern = os.path.join(glob.escape(os.path.abspath(project_dir)), "ios", "*", "project.pbxproj")
    matches = sorted(p for p in glob.glob(pattern) if os.path.isfile(p))
    if not matches:
        raise ProjectNotFoundError("Couldn't find XCode project")
    return matches[0]


def locate(project_dir: str, kind: str) -> str:
    """返回给定类型配置文件的绝对路径；找不到时抛出异常。"""
    if kind == IOS_PROJECT:
        return find_pbxproj(project_dir)
    if kind not in _ANDROID_PATHS:
        raise ValueError(f"unknown file kind: {kind}")

    parts, label = _ANDROID_PATHS[kind]
    path = os.path.join(os.path.abspath(project_dir), *parts)
    if not os.path.isfile(path):
        raise ConfigFileNotFoundError(f"Couldn't find {label} at {path}", path)
    return path
