"""数据模型 — 目录条目、转换任务与结果"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from webp_batch.errors import DirectoryReadError


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class DirectoryEntry:
    """一次目录列举得到的节点，不缓存，每次访问重新读取"""
    path: Path
    name: str
    kind: EntryKind

    @classmethod
    def from_dir_entry(cls, entry: os.DirEntry) -> "DirectoryEntry":
        # 不跟随符号链接：链接本身归为 OTHER
        if entry.is_file(follow_symlinks=False):
            kind = EntryKind.FILE
        elif entry.is_dir(follow_symlinks=False):
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.OTHER
        return cls(path=Path(entry.path), name=entry.name, kind=kind)


@dataclass(frozen=True)
class ConversionTask:
    """一次编码调用的参数：目标文件与源文件同目录、同名、不同扩展名"""
    source: Path
    destination: Path
    quality: int


class ConversionStatus(Enum):
    SKIPPED = "skipped"
    CONVERTED = "converted"
    FAILED = "failed"


@dataclass
class ConversionResult:
    task: ConversionTask
    status: ConversionStatus
    message: str = ""


@dataclass
class WalkReport:
    """一次遍历的结果：每个文件的转换结果与无法读取的目录"""
    results: list[ConversionResult] = field(default_factory=list)
    errors: list[DirectoryReadError] = field(default_factory=list)

    def count(self, status: ConversionStatus) -> int:
        return sum(1 for r in self.results if r.status is status)


@dataclass
class ScanStats:
    converted: int = 0
    skipped: int = 0
    failed: int = 0
    unreadable_dirs: int = 0

    @classmethod
    def from_report(cls, report: WalkReport) -> "ScanStats":
        return cls(
            converted=report.count(ConversionStatus.CONVERTED),
            skipped=report.count(ConversionStatus.SKIPPED),
            failed=report.count(ConversionStatus.FAILED),
            unreadable_dirs=len(report.errors),
        )

    def to_dict(self) -> dict:
        return {
            "converted": self.converted,
            "skipped": self.skipped,
            "failed": self.failed,
            "unreadable_dirs": self.unreadable_dirs,
        }
