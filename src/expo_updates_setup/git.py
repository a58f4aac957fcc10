"""
对 `git` 命令行的轻量封装：暂存意图、工作区检查、审阅与提交。
"""

from __future__ import annotations

import sys

from .errors import DirtyGitTreeError, DirtyTreeAbortedError
from .pipeline_utils import run_cmd


def git_add(path: str, *, intent_to_add: bool = False, cwd: str | None = None,
            verbose: bool = False) -> None:
    """把路径加入索引；`intent_to_add` 时只登记“将要跟踪”。"""
    cmd = ["git", "add"]
    if intent_to_add:
        cmd.append("--intent-to-add")
    cmd.append(path)
    run_cmd(cmd, cwd=cwd, verbose=verbose)


def git_status(*, cwd: str | None = None, verbose: bool = False) -> list[str]:
    out = run_cmd(["git", "status", "--porcelain"], cwd=cwd, verbose=verbose)
    return [line for line in out.splitlines() if line.strip()]


def ensure_git_status_is_clean(*, cwd: str | None = None, verbose: bool = False) -> None:
    """工作区有改动时抛出 `DirtyGitTreeError`。"""
    changes = git_status(cwd=cwd, verbose=verbose)
    if changes:
        raise DirtyGitTreeError(
            "Please commit all changes. Uncommitted changes:\n" + "\n".join(changes)
        )


def show_diff(*, cwd: str | None = None, verbose: bool = False) -> None:
    print(run_cmd(["git", "--no-pager", "diff"], cwd=cwd, verbose=verbose))


def commit_changes(message: str, *, cwd: str | None = None, verbose: bool = False) -> None:
    run_cmd(["git", "add", "-A"], cwd=cwd, verbose=verbose)
    run_cmd(["git", "commit", "-m", message], cwd=cwd, verbose=verbose)


_CHOICES = (
    ("commit", "Yes, commit the changes"),
    ("diff", "Show the diff and ask me again"),
    ("abort", "Abort"),
)


def review_and_commit_changes(
    message: str,
    *,
    non_interactive: bool,
    cwd: str | None = None,
    verbose: bool = False,
) -> None:
    """让用户审阅改动并提交；用户中止时抛出 `DirtyTreeAbortedError`。"""
    if non_interactive or not sys.stdin.isatty():
        raise DirtyTreeAbortedError(
            "Cannot commit changes in non-interactive mode. "
            "Run the command in interactive mode to review and commit changes."
        )

    while True:
        print("Can we commit these changes to git for you?")
        for i, (_key, label) in enumerate(_CHOICES, start=1):
            print(f"  {i}) {label}")
        raw = input(f"Select [1-{len(_CHOICES)}]: ").strip()
        if not raw.isdigit() or not 1 <= int(raw) <= len(_CHOICES):
            print("Invalid selection. Please enter a valid number.")
            continue

        choice = _CHOICES[int(raw) - 1][0]
        if choice == "commit":
            commit_changes(message, cwd=cwd, verbose=verbose)
            return
        if choice == "diff":
            show_diff(cwd=cwd, verbose=verbose)
            continue
        raise DirtyTreeAbortedError("Aborted by user")
