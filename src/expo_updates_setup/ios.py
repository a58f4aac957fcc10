"""
iOS 侧配置：在 Xcode 打包脚本中挂接 `expo-updates`，并生成 `Expo.plist`。

流程：
1) 定位 `ios/*/project.pbxproj` 并无损解析。
2) 找到 "Bundle React Native code and images" 构建阶段。
3) 若脚本中尚无 `create-manifest-ios.sh`，追加到脚本末尾。
4) 整体重新生成 `ios/<ProjectName>/Supporting/Expo.plist` 并登记给 git。
"""

from __future__ import annotations

import os
import plistlib

from . import git
from .errors import BuildPhaseNotFoundError
from .locator import IOS_PROJECT, locate
from .pbxproj import PbxDict, PbxDocument, parse_pbxproj
from .pipeline_utils import read_text, write_if_changed
from .types import UpdateConfig

BUNDLE_BUILD_PHASE_NAME = '"Bundle React Native code and images"'
EXPO_UPDATES_SCRIPT = "../node_modules/expo-updates/scripts/create-manifest-ios.sh"


def find_build_phase(doc: PbxDocument, name: str) -> PbxDict:
    """返回第一个 `name` 原文完全相等的 shell 脚本构建阶段。"""
    for phase in doc.find_objects(
        lambda obj: obj.get_raw("isa") == "PBXShellScriptBuildPhase"
        and obj.get_raw("name") == name
    ):
        return phase
    raise BuildPhaseNotFoundError(f"Couldn't find a build phase script for {name}")


def ensure_script_appended(phase: PbxDict, script_path: str) -> bool:
    """脚本尚未包含 `script_path` 时追加一行，返回是否修改。"""
    shell_script = phase.get_raw("shellScript")
    if shell_script is None:
        raise BuildPhaseNotFoundError("Build phase has no shellScript field")
    if script_path in shell_script:
        return False

    # 脚本是带引号的字面量，换行写作转义的 `\n`。
    if len(shell_script) >= 2 and shell_script.startswith('"') and shell_script.endswith('"'):
        body = shell_script[:-1]
    else:
        # 未加引号的单词（如 `true`）需先包成字符串字面量，并另起一行。
        body = f'"{shell_script}\\n'
    phase.set_raw("shellScript", f'{body}{script_path}\\n"')
    return True


def expo_plist_items(config: UpdateConfig) -> dict[str, str]:
    if config.uses_runtime_version:
        return {
            "EXUpdatesRuntimeVersion": config.runtime_version or "",
            "EXUpdatesURL": config.update_url,
        }
    return {
        "EXUpdatesSDKVersion": config.sdk_version,
        "EXUpdatesURL": config.update_url,
    }


def render_expo_plist(config: UpdateConfig) -> bytes:
    return plistlib.dumps(expo_plist_items(config), fmt=plistlib.FMT_XML, sort_keys=False)


def expo_plist_path(project_dir: str, pbxproj_path: str) -> str:
    """`ios/<ProjectName>/Supporting/Expo.plist`，工程名取自 `.xcodeproj` 目录名。"""
    xcodeproj_dir = os.path.dirname(os.path.abspath(pbxproj_path))
    name = os.path.basename(xcodeproj_dir)
    if name.endswith(".xcodeproj"):
        name = name[: -len(".xcodeproj")]
    return os.path.join(os.path.abspath(project_dir), "ios", name, "Supporting", "Expo.plist")


def write_expo_plist(path: str, config: UpdateConfig) -> None:
    """无条件覆盖写入；该文件完全由本工具生成。"""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(render_expo_plist(config))


def configure_updates_ios(
    project_dir: str, config: UpdateConfig, *, verbose: bool = False
) -> list[str]:
    """执行 iOS 侧全部修改，返回写入过的文件路径。"""
    pbxproj_path = locate(project_dir, IOS_PROJECT)
    text = read_text(pbxproj_path)
    doc = parse_pbxproj(text)

    phase = find_build_phase(doc, BUNDLE_BUILD_PHASE_NAME)
    changed: list[str] = []
    if ensure_script_appended(phase, EXPO_UPDATES_SCRIPT):
        if verbose:
            print(f"Appending {EXPO_UPDATES_SCRIPT} to {BUNDLE_BUILD_PHASE_NAME}")
        if write_if_changed(pbxproj_path, text, doc.serialize()):
            changed.append(pbxproj_path)

    plist_path = expo_plist_path(project_dir, pbxproj_path)
    write_expo_plist(plist_path, config)
    changed.append(plist_path)
    git.git_add(plist_path, intent_to_add=True, cwd=project_dir, verbose=verbose)
    return changed
