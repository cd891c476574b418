"""目录遍历 — 深度优先扫描目录树并分发待转换文件"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from webp_batch.config import SOURCE_EXTENSIONS
from webp_batch.converter import Converter
from webp_batch.errors import DirectoryReadError
from webp_batch.models import DirectoryEntry, EntryKind, WalkReport

logger = logging.getLogger(__name__)


def list_directory(path: Path) -> list[DirectoryEntry]:
    """列出目录的直接子节点，保持文件系统返回的顺序"""
    with os.scandir(path) as it:
        return [DirectoryEntry.from_dir_entry(entry) for entry in it]


class Walker:
    """深度优先遍历目录树，匹配扩展名的文件交给 Converter"""

    def __init__(
        self,
        converter: Converter,
        *,
        source_exts: tuple[str, ...] = SOURCE_EXTENSIONS,
        ignore_case: bool = False,
    ):
        self.converter = converter
        self.ignore_case = ignore_case
        self.source_exts = tuple(e.lower() for e in source_exts) if ignore_case else tuple(source_exts)

    def matches(self, name: str) -> bool:
        """后缀匹配；默认区分大小写（photo.PNG 不匹配）"""
        if self.ignore_case:
            name = name.lower()
        return name.endswith(self.source_exts)

    def walk(self, directory: Path) -> WalkReport:
        """遍历 directory，返回所有文件的转换结果与无法读取的目录。

        使用显式栈代替递归：子目录的全部内容处理完毕后才继续父目录的
        剩余条目，顺序与递归实现一致。任何目录读取失败只影响该子树。
        """
        report = WalkReport()
        stack: list[tuple[Path, Iterator[DirectoryEntry]]] = []

        self._enter(Path(directory), stack, report)
        while stack:
            current, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue

            if entry.kind is EntryKind.FILE:
                if self.matches(entry.name):
                    report.results.append(self.converter.convert(current, entry.name))
            elif entry.kind is EntryKind.DIRECTORY:
                self._enter(entry.path, stack, report)
            # 符号链接与特殊文件忽略

        return report

    def _enter(
        self,
        directory: Path,
        stack: list[tuple[Path, Iterator[DirectoryEntry]]],
        report: WalkReport,
    ) -> None:
        try:
            entries = list_directory(directory)
        except OSError as e:
            error = DirectoryReadError(directory, e.strerror or str(e))
            logger.error("❌ 无法读取目录: %s - %s", directory, error.reason)
            report.errors.append(error)
            return
        logger.debug("📂 %s (%d 项)", directory, len(entries))
        stack.append((directory, iter(entries)))
