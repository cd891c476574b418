"""扫描流程 — 校验根目录、初始化编码器、遍历并汇总"""

import logging
from pathlib import Path

from webp_batch.codec import Codec, init_codec
from webp_batch.config import (
    DEFAULT_CODEC,
    DEFAULT_QUALITY,
    MAX_QUALITY,
    MIN_QUALITY,
    SOURCE_EXTENSIONS,
    TARGET_EXTENSION,
)
from webp_batch.converter import Converter
from webp_batch.errors import FatalSetupError
from webp_batch.models import ScanStats
from webp_batch.walker import Walker

logger = logging.getLogger(__name__)


class Scanner:
    """一次完整的批量转换"""

    def __init__(
        self,
        root: Path,
        *,
        quality: int = DEFAULT_QUALITY,
        source_exts: tuple[str, ...] = SOURCE_EXTENSIONS,
        target_ext: str = TARGET_EXTENSION,
        codec_name: str = DEFAULT_CODEC,
        ignore_case: bool = False,
        codec: Codec | None = None,
    ):
        self.root = root
        self.quality = quality
        self.source_exts = source_exts
        self.target_ext = target_ext
        self.codec_name = codec_name
        self.ignore_case = ignore_case
        self.codec = codec

    def run(self) -> ScanStats:
        """执行扫描，返回统计结果。

        Raises:
            FatalSetupError: 根目录不可用、参数非法或编码器不可用
        """
        self._validate()
        if self.codec is None:
            self.codec = init_codec(self.codec_name, self.target_ext)

        converter = Converter(self.codec, quality=self.quality, target_ext=self.target_ext)
        walker = Walker(converter, source_exts=self.source_exts, ignore_case=self.ignore_case)

        self._print_banner()
        root = self.root.resolve()
        logger.info("🔍 开始扫描目录: %s", root)
        report = walker.walk(root)
        logger.info("✅ 扫描完成。")

        stats = ScanStats.from_report(report)
        self._print_summary(stats)
        return stats

    def _validate(self) -> None:
        if not self.root.exists():
            raise FatalSetupError(f"目录不存在: {self.root}")
        if not self.root.is_dir():
            raise FatalSetupError(f"不是目录: {self.root}")
        if not MIN_QUALITY <= self.quality <= MAX_QUALITY:
            raise FatalSetupError(f"质量必须在 {MIN_QUALITY}-{MAX_QUALITY} 之间: {self.quality}")
        if not self.source_exts:
            raise FatalSetupError("至少需要一个源扩展名")
        if self.target_ext in self.source_exts:
            raise FatalSetupError(f"目标扩展名 {self.target_ext} 不能同时是源扩展名")

    def _print_banner(self) -> None:
        logger.info("=" * 60)
        logger.info("🖼️  webp-batch — 图片批量转换工具")
        logger.info("=" * 60)
        logger.info("📂 扫描目录: %s", self.root.resolve())
        logger.info("🎯 %s -> %s | 质量: %d", ", ".join(self.source_exts), self.target_ext, self.quality)
        logger.info("🔧 编码器: %s", self.codec.name)
        if self.ignore_case:
            logger.info("🔠 扩展名匹配: 不区分大小写")
        logger.info("=" * 60)

    def _print_summary(self, stats: ScanStats) -> None:
        logger.info("=" * 60)
        logger.info("📊 转换总结")
        logger.info("=" * 60)
        logger.info("  ✨ 已转换:     %d 个", stats.converted)
        logger.info("  ⏭  已存在跳过: %d 个", stats.skipped)
        logger.info("  ❌ 失败:       %d 个", stats.failed)
        if stats.unreadable_dirs:
            logger.info("  🚫 无法读取目录: %d 个", stats.unreadable_dirs)
        logger.info("=" * 60)
