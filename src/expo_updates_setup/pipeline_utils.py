from __future__ import annotations

"""
流程通用工具：外部命令执行与原子写文件。
"""

import os
import subprocess
import tempfile


def run_cmd(cmd: list[str], *, cwd: str | None = None, verbose: bool = False) -> str:
    """执行外部命令并返回 stdout，失败时抛出带 stderr 的异常。"""
    if verbose:
        if cwd:
            print(f"+ (cd {cwd}) {' '.join(cmd)}")
        else:
            print(f"+ {' '.join(cmd)}")
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, cwd=cwd, check=False)
    if p.returncode != 0:
        raise RuntimeError(f"Command failed: {' '.join(cmd)}\n{p.stderr.decode(errors='replace')}")
    return p.stdout.decode(errors="replace")


def read_text(path: str) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text_atomic(path: str, text: str) -> None:
    """先写入同目录临时文件再 `os.replace`，避免留下写了一半的文件。"""
    parent = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if os.path.exists(path):
            os.chmod(tmp_path, os.stat(path).st_mode & 0o7777)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def write_if_changed(path: str, old_text: str, new_text: str) -> bool:
    """仅当内容变化时写回，返回是否写入。"""
    if new_text == old_text:
        return False
    write_text_atomic(path, new_text)
    return True
