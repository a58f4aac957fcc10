"""
Xcode `project.pbxproj`（OpenStep 风格 plist）的无损解析与回写。

解析结果保留每个标量在原文中的位置与原始写法（包括引号与转义）。
序列化时只替换被修改过的标量，注释、缩进、对象顺序等其余字节原样保留。
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

from .errors import ParseError

_BARE_RE = re.compile(r"""[^\s{}()=;,"']+""")


class PbxScalar:
    """字符串/数字等标量节点；`raw` 保留原文写法（含引号）。"""

    def __init__(self, raw: str, start: int, end: int) -> None:
        self.raw = raw
        self.start = start
        self.end = end
        self._original = raw

    @property
    def dirty(self) -> bool:
        return self.raw != self._original

    def unquoted(self) -> str:
        if len(self.raw) >= 2 and self.raw[0] == self.raw[-1] and self.raw[0] in "\"'":
            return self.raw[1:-1]
        return self.raw

    def __repr__(self) -> str:
        return f"PbxScalar({self.raw!r})"


class PbxArray:
    def __init__(self, items: list[PbxNode]) -> None:
        self.items = items


class PbxDict:
    """字典节点；键按去掉引号后的文本索引，保持原文顺序。"""

    def __init__(self, entries: dict[str, PbxNode]) -> None:
        self.entries = entries

    def get(self, key: str) -> PbxNode | None:
        return self.entries.get(key)

    def get_raw(self, key: str) -> str | None:
        node = self.entries.get(key)
        return node.raw if isinstance(node, PbxScalar) else None

    def set_raw(self, key: str, raw: str) -> None:
        """改写已有标量的原文；不支持新增键。"""
        node = self.entries.get(key)
        if not isinstance(node, PbxScalar):
            raise KeyError(key)
        node.raw = raw


PbxNode = PbxScalar | PbxArray | PbxDict


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _error(self, message: str) -> ParseError:
        line = self.text.count("\n", 0, self.pos) + 1
        return ParseError(f"Malformed project.pbxproj (line {line}): {message}")

    def _skip(self) -> None:
        """跳过空白与 `//`、`/* */` 注释。"""
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n":
                self.pos += 1
            elif text.startswith("//", self.pos):
                nl = text.find("\n", self.pos)
                self.pos = len(text) if nl < 0 else nl + 1
            elif text.startswith("/*", self.pos):
                close = text.find("*/", self.pos + 2)
                if close < 0:
                    raise self._error("unterminated comment")
                self.pos = close + 2
            else:
                return

    def _expect(self, ch: str) -> None:
        self._skip()
        if self.pos >= len(self.text) or self.text[self.pos] != ch:
            found = self.text[self.pos] if self.pos < len(self.text) else "end of file"
            raise self._error(f"expected {ch!r}, found {found!r}")
        self.pos += 1

    def parse_document(self) -> PbxNode:
        root = self.parse_value()
        self._skip()
        if self.pos != len(self.text):
            raise self._error("trailing content after root object")
        return root

    def parse_value(self) -> PbxNode:
        self._skip()
        if self.pos >= len(self.text):
            raise self._error("unexpected end of file")
        ch = self.text[self.pos]
        if ch == "{":
            self.pos += 1
            return self._parse_dict()
        if ch == "(":
            self.pos += 1
            return self._parse_array()
        return self._parse_scalar()

    def _parse_scalar(self) -> PbxScalar:
        text = self.text
        start = self.pos
        quote = text[start]
        if quote in "\"'":
            i = start + 1
            while i < len(text):
                if text[i] == "\\":
                    i += 2
                    continue
                if text[i] == quote:
                    self.pos = i + 1
                    return PbxScalar(text[start:self.pos], start, self.pos)
                i += 1
            raise self._error("unterminated string")

        m = _BARE_RE.match(text, start)
        if not m:
            raise self._error(f"unexpected character {quote!r}")
        self.pos = m.end()
        return PbxScalar(m.group(0), start, self.pos)

    def _parse_dict(self) -> PbxDict:
        entries: dict[str, PbxNode] = {}
        while True:
            self._skip()
            if self.pos >= len(self.text):
                raise self._error("unterminated dictionary")
            if self.text[self.pos] == "}":
                self.pos += 1
                return PbxDict(entries)
            key = self._parse_scalar()
            self._expect("=")
            entries[key.unquoted()] = self.parse_value()
            self._expect(";")

    def _parse_array(self) -> PbxArray:
        items: list[PbxNode] = []
        while True:
            self._skip()
            if self.pos >= len(self.text):
                raise self._error("unterminated array")
            if self.text[self.pos] == ")":
                self.pos += 1
                return PbxArray(items)
            items.append(self.parse_value())
            self._skip()
            if self.pos < len(self.text) and self.text[self.pos] == ",":
                self.pos += 1


def _walk_scalars(node: PbxNode) -> Iterator[PbxScalar]:
    if isinstance(node, PbxScalar):
        yield node
    elif isinstance(node, PbxArray):
        for item in node.items:
            yield from _walk_scalars(item)
    else:
        for value in node.entries.values():
            yield from _walk_scalars(value)


class PbxDocument:
    """一次编辑会话中的工程描述树。"""

    def __init__(self, text: str, root: PbxDict) -> None:
        self.text = text
        self.root = root

    @property
    def objects(self) -> PbxDict:
        objects = self.root.get("objects")
        if not isinstance(objects, PbxDict):
            raise ParseError("Malformed project.pbxproj: missing 'objects' dictionary")
        return objects

    def find_objects(self, predicate: Callable[[PbxDict], bool]) -> Iterator[PbxDict]:
        """按原文顺序遍历满足条件的对象。"""
        for obj in self.objects.entries.values():
            if isinstance(obj, PbxDict) and predicate(obj):
                yield obj

    def serialize(self) -> str:
        """把修改过的标量拼回原文，其他内容保持不变。"""
        dirty = sorted((s for s in _walk_scalars(self.root) if s.dirty), key=lambda s: s.start)
        if not dirty:
            return self.text
        out: list[str] = []
        cursor = 0
        for scalar in dirty:
            out.append(self.text[cursor:scalar.start])
            out.append(scalar.raw)
            cursor = scalar.end
        out.append(self.text[cursor:])
        return "".join(out)


def parse_pbxproj(text: str) -> PbxDocument:
    """解析 `project.pbxproj` 文本；格式错误时抛出 `ParseError`。"""
    root = _Parser(text).parse_document()
    if not isinstance(root, PbxDict):
        raise ParseError("Malformed project.pbxproj: root is not a dictionary")
    return PbxDocument(text, root)
