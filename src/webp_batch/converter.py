"""单文件转换 — 计算目标路径、跳过已转换文件、调用编码器"""

import logging
from pathlib import Path

from webp_batch.codec import Codec
from webp_batch.config import DEFAULT_QUALITY, TARGET_EXTENSION
from webp_batch.errors import CodecError, ConversionError
from webp_batch.models import ConversionResult, ConversionStatus, ConversionTask

logger = logging.getLogger(__name__)


def destination_for(directory: Path, filename: str, target_ext: str = TARGET_EXTENSION) -> Path:
    """替换最后一个扩展名: v1.2.png -> v1.2.webp"""
    stem = filename[:filename.rfind(".")] if "." in filename else filename
    return Path(directory) / f"{stem}{target_ext}"


class Converter:
    """将单个源文件转换为目标格式，目标已存在则跳过"""

    def __init__(
        self,
        codec: Codec,
        *,
        quality: int = DEFAULT_QUALITY,
        target_ext: str = TARGET_EXTENSION,
    ):
        self.codec = codec
        self.quality = quality
        self.target_ext = target_ext

    def convert(self, directory: Path, filename: str) -> ConversionResult:
        """转换 directory/filename，失败不抛出，以结果返回"""
        source = Path(directory) / filename
        task = ConversionTask(
            source=source,
            destination=destination_for(directory, filename, self.target_ext),
            quality=self.quality,
        )

        # 检查与写入之间不加锁，外部进程的竞争不做防护
        if task.destination.exists():
            logger.info("⏭  已存在，跳过: %s", task.destination)
            return ConversionResult(task, ConversionStatus.SKIPPED, "already converted")

        try:
            output = self._encode(task)
        except ConversionError as e:
            logger.error("❌ 转换失败: %s - %s", e.source, e.reason)
            return ConversionResult(task, ConversionStatus.FAILED, e.reason)

        logger.info("✅ 已转换: %s -> %s", task.source, task.destination)
        if output:
            logger.info("    %s", output)
        return ConversionResult(task, ConversionStatus.CONVERTED, output)

    def _encode(self, task: ConversionTask) -> str:
        try:
            return self.codec.encode(task.source, task.destination, task.quality)
        except CodecError as e:
            raise ConversionError(task.source, e.message) from e
        except OSError as e:
            raise ConversionError(task.source, str(e)) from e
        except Exception as e:
            # 编码器的任何异常都只影响当前文件
            raise ConversionError(task.source, f"{type(e).__name__}: {e}") from e
