"""
Android 侧配置：在 `build.gradle` 中引入生成 manifest 的脚本，
并在 `AndroidManifest.xml` 的 `<application>` 下维护 `expo-updates` 的 meta-data。
"""

from __future__ import annotations

import re
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from .errors import ApplicationNotFoundError, ParseError
from .locator import ANDROID_BUILD_SCRIPT, ANDROID_MANIFEST, locate
from .pipeline_utils import read_text, write_if_changed
from .types import UpdateConfig

APPLY_BUILD_SCRIPT = (
    'apply from: "../../node_modules/expo-updates/scripts/create-manifest-android.gradle"'
)
BUILD_SCRIPT_COMMENT = "// Integration with Expo updates"

SDK_VERSION_KEY = "expo.modules.updates.EXPO_SDK_VERSION"
RUNTIME_VERSION_KEY = "expo.modules.updates.EXPO_RUNTIME_VERSION"
UPDATE_URL_KEY = "expo.modules.updates.EXPO_UPDATE_URL"

_XML_DECL_RE = re.compile(r"\s*<\?xml[^>]*\?>[ \t]*\r?\n?")


def _newline_of(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def ensure_build_script_included(text: str, include_line: str) -> tuple[str, bool]:
    """按整行比较（单双引号两种写法都算）判断是否已引入，返回 `(新文本, 是否修改)`。"""
    spellings = {include_line, include_line.replace('"', "'")}
    if any(line in spellings for line in text.splitlines()):
        return text, False
    nl = _newline_of(text)
    return f"{text}{nl}{BUILD_SCRIPT_COMMENT}{nl}{include_line}{nl}", True


def parse_manifest(text: str) -> minidom.Document:
    try:
        return minidom.parseString(text.encode("utf-8"))
    except ExpatError as e:
        raise ParseError(f"Malformed AndroidManifest.xml: {e}") from e


def serialize_manifest(doc: minidom.Document, original_text: str) -> str:
    """回写文档；保留原文的 BOM、XML 声明、换行风格与结尾换行。"""
    bom = "\ufeff" if original_text.startswith("\ufeff") else ""
    m = _XML_DECL_RE.match(original_text, len(bom))
    prolog = m.group(0).lstrip() if m else ""
    body = "\n".join(node.toxml() for node in doc.childNodes)
    tail = "\n" if original_text.endswith("\n") else ""
    # expat 会把 `\r\n` 归一为 `\n`，这里按原文还原。
    if "\r\n" in original_text:
        body = body.replace("\n", "\r\n")
        tail = tail.replace("\n", "\r\n")
    return f"{bom}{prolog}{body}{tail}"


def _application(doc: minidom.Document) -> minidom.Element:
    nodes = doc.getElementsByTagName("application")
    if not nodes:
        raise ApplicationNotFoundError("AndroidManifest.xml has no <application> element")
    return nodes[0]


def _is_blank_text(node: minidom.Node | None) -> bool:
    return (
        node is not None
        and node.nodeType == node.TEXT_NODE
        and node.data.strip() == ""
    )


def _indent_before(node: minidom.Node) -> str | None:
    """节点所在行的缩进；前面不是换行空白时返回 `None`。"""
    prev = node.previousSibling
    if _is_blank_text(prev) and "\n" in prev.data:
        return prev.data.rsplit("\n", 1)[1]
    return None


def find_metadata(application: minidom.Element, name: str) -> minidom.Element | None:
    for node in application.childNodes:
        if (
            node.nodeType == node.ELEMENT_NODE
            and node.tagName == "meta-data"
            and node.getAttribute("android:name") == name
        ):
            return node
    return None


def upsert_metadata(doc: minidom.Document, name: str, value: str) -> None:
    """存在则只改 `android:value`，否则在 `<application>` 末尾新建一项。"""
    application = _application(doc)
    metadata = find_metadata(application, name)
    if metadata is not None:
        metadata.setAttribute("android:value", value)
        return

    node = doc.createElement("meta-data")
    node.setAttribute("android:name", name)
    node.setAttribute("android:value", value)

    app_indent = _indent_before(application) or ""
    child_indent = None
    for child in application.childNodes:
        if child.nodeType == child.ELEMENT_NODE:
            child_indent = _indent_before(child)
            break
    if child_indent is None:
        child_indent = app_indent + "    "

    last = application.lastChild
    if _is_blank_text(last) and "\n" in last.data:
        application.insertBefore(doc.createTextNode("\n" + child_indent), last)
        application.insertBefore(node, last)
    else:
        application.appendChild(doc.createTextNode("\n" + child_indent))
        application.appendChild(node)
        application.appendChild(doc.createTextNode("\n" + app_indent))


def remove_metadata(doc: minidom.Document, name: str) -> None:
    """移除同名 meta-data 及其前导缩进；不存在时什么也不做。"""
    application = _application(doc)
    metadata = find_metadata(application, name)
    if metadata is None:
        return
    prev = metadata.previousSibling
    if _is_blank_text(prev):
        application.removeChild(prev)
    application.removeChild(metadata)


def apply_update_metadata(doc: minidom.Document, config: UpdateConfig) -> None:
    """SDK 版本与运行时版本互斥，只保留当前模式对应的一项。"""
    if config.uses_runtime_version:
        remove_metadata(doc, SDK_VERSION_KEY)
        upsert_metadata(doc, RUNTIME_VERSION_KEY, config.runtime_version or "")
    else:
        remove_metadata(doc, RUNTIME_VERSION_KEY)
        upsert_metadata(doc, SDK_VERSION_KEY, config.sdk_version)
    upsert_metadata(doc, UPDATE_URL_KEY, config.update_url)


def configure_manifest_text(text: str, config: UpdateConfig) -> str:
    doc = parse_manifest(text)
    apply_update_metadata(doc, config)
    return serialize_manifest(doc, text)


def configure_updates_android(
    project_dir: str, config: UpdateConfig, *, verbose: bool = False
) -> list[str]:
    """执行 Android 侧全部修改，返回写入过的文件路径。"""
    changed: list[str] = []

    build_gradle_path = locate(project_dir, ANDROID_BUILD_SCRIPT)
    gradle_text = read_text(build_gradle_path)
    new_gradle_text, _ = ensure_build_script_included(gradle_text, APPLY_BUILD_SCRIPT)
    if write_if_changed(build_gradle_path, gradle_text, new_gradle_text):
        if verbose:
            print(f"Added expo-updates build script to {build_gradle_path}")
        changed.append(build_gradle_path)

    manifest_path = locate(project_dir, ANDROID_MANIFEST)
    manifest_text = read_text(manifest_path)
    if write_if_changed(manifest_path, manifest_text, configure_manifest_text(manifest_text, config)):
        if verbose:
            print(f"Updated expo-updates meta-data in {manifest_path}")
        changed.append(manifest_path)
    return changed
