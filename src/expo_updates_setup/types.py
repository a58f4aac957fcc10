"""
编辑器与编排流程共享的轻量类型定义。
"""

import enum
from dataclasses import dataclass


class Platform(str, enum.Enum):
    ANDROID = "android"
    IOS = "ios"

    @property
    def display_name(self) -> str:
        return "Android" if self is Platform.ANDROID else "iOS"


@dataclass(frozen=True)
class UpdateConfig:
    """描述一次 `expo-updates` 配置的目标值。"""

    sdk_version: str
    update_url: str
    # 设置后优先于 `sdk_version`，两者只会写入其一。
    runtime_version: str | None = None

    @property
    def uses_runtime_version(self) -> bool:
        return bool(self.runtime_version)
