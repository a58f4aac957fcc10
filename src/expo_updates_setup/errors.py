"""
配置流程使用的异常类型。

编辑器层的异常原样向上传递，由 CLI 统一转换为 `SystemExit`。
"""


class ConfigureError(RuntimeError):
    """所有可预期失败的基类。"""


class ProjectNotFoundError(ConfigureError):
    """`ios/` 下找不到 Xcode 工程描述文件。"""


class ConfigFileNotFoundError(ConfigureError, FileNotFoundError):
    """固定路径上的配置文件不存在。"""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ParseError(ConfigureError):
    """结构化文件格式错误。"""


class BuildPhaseNotFoundError(ConfigureError):
    pass


class ApplicationNotFoundError(ConfigureError):
    """`AndroidManifest.xml` 中没有 `<application>` 元素。"""


class AppConfigError(ConfigureError):
    pass


class NotLoggedInError(ConfigureError):
    pass


class DirtyGitTreeError(ConfigureError):
    """工作区存在未提交的改动。"""


class DirtyTreeAbortedError(ConfigureError):
    """用户在审阅/提交步骤中选择了中止。"""
