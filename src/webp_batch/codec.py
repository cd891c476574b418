"""编码器 — 对外部图像编码库的封装

统一接口: encode(source, destination, quality) -> 诊断信息，失败抛出 CodecError。
进程内只初始化一次（检查 cwebp 可执行文件 / Pillow 格式支持），之后复用同一实例。
"""

import logging
import shutil
import subprocess
from pathlib import Path

from PIL import Image, features

from webp_batch.config import CWEBP_BINARY, DEFAULT_CODEC, TARGET_EXTENSION
from webp_batch.errors import CodecError, FatalSetupError

logger = logging.getLogger(__name__)


class Codec:
    """编码器基类"""

    name = ""

    def __init__(self, target_ext: str = TARGET_EXTENSION):
        self.target_ext = target_ext

    def setup(self) -> None:
        """一次性初始化，失败抛出 CodecError"""

    def encode(self, source: Path, destination: Path, quality: int) -> str:
        raise NotImplementedError


class PillowCodec(Codec):
    """基于 Pillow 的编码器，输出格式由目标扩展名决定"""

    name = "pillow"

    def __init__(self, target_ext: str = TARGET_EXTENSION):
        super().__init__(target_ext)
        self.format: str | None = None

    def setup(self) -> None:
        fmt = Image.registered_extensions().get(self.target_ext.lower())
        if fmt is None or fmt not in Image.SAVE:
            raise CodecError(f"Pillow 不支持写入 {self.target_ext} 格式")
        if fmt == "WEBP" and not features.check("webp"):
            raise CodecError("当前 Pillow 未编译 WebP 支持")
        self.format = fmt

    def encode(self, source: Path, destination: Path, quality: int) -> str:
        if self.format is None:
            self.setup()
        try:
            with Image.open(source) as img:
                img = _normalize_mode(img, self.format)
                img.save(destination, self.format, quality=quality)
                width, height = img.size
                mode = img.mode
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise CodecError(str(e)) from e

        kb = destination.stat().st_size / 1024
        return f"{width}x{height} {mode}, {kb:.1f} KB"


class CwebpCodec(Codec):
    """调用 cwebp 可执行文件，仅支持 .webp 输出"""

    name = "cwebp"

    def __init__(self, target_ext: str = TARGET_EXTENSION, binary: str = CWEBP_BINARY):
        super().__init__(target_ext)
        self.binary = binary
        self.binary_path: str | None = None

    def setup(self) -> None:
        if self.target_ext.lower() != ".webp":
            raise CodecError(f"cwebp 只能输出 .webp，不支持 {self.target_ext}")
        self.binary_path = shutil.which(self.binary)
        if self.binary_path is None:
            raise CodecError(f"找不到 {self.binary} 可执行文件，请先安装 libwebp 工具")

    def encode(self, source: Path, destination: Path, quality: int) -> str:
        if self.binary_path is None:
            self.setup()
        args = [self.binary_path, "-q", str(quality), str(source), "-o", str(destination)]
        try:
            proc = subprocess.run(args, capture_output=True, text=True)
        except OSError as e:
            raise CodecError(str(e)) from e
        # cwebp 把统计信息写到 stderr
        output = (proc.stderr or proc.stdout or "").strip()
        if proc.returncode != 0:
            raise CodecError(output or f"{self.binary} 退出码 {proc.returncode}", output=output)
        return output


CODECS: dict[str, type[Codec]] = {
    PillowCodec.name: PillowCodec,
    CwebpCodec.name: CwebpCodec,
}


def _normalize_mode(img: Image.Image, fmt: str) -> Image.Image:
    """调色板、灰度等模式统一转为 RGB/RGBA"""
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    if fmt == "JPEG":
        return img if img.mode == "RGB" else img.convert("RGB")
    if img.mode in ("RGB", "RGBA"):
        return img
    return img.convert("RGBA" if has_alpha else "RGB")


# ------------------------------------------------------------------
# 进程级单例
# ------------------------------------------------------------------

_codec: Codec | None = None


def init_codec(name: str = DEFAULT_CODEC, target_ext: str = TARGET_EXTENSION) -> Codec:
    """初始化编码器（进程内仅执行一次）。

    Args:
        name: 编码器名称（pillow / cwebp）
        target_ext: 目标扩展名

    Returns:
        已初始化的编码器

    Raises:
        FatalSetupError: 编码器不存在或初始化失败
    """
    global _codec
    if _codec is not None:
        logger.debug("编码器已初始化: %s", _codec.name)
        return _codec

    codec_cls = CODECS.get(name)
    if codec_cls is None:
        raise FatalSetupError(f"未知编码器 '{name}'，可选: {', '.join(sorted(CODECS))}")

    codec = codec_cls(target_ext)
    try:
        codec.setup()
    except CodecError as e:
        raise FatalSetupError(f"编码器初始化失败: {e}") from e

    logger.debug("编码器就绪: %s (%s)", codec.name, target_ext)
    _codec = codec
    return codec


def get_codec() -> Codec:
    """获取已初始化的编码器"""
    if _codec is None:
        raise RuntimeError("编码器尚未初始化，请先调用 init_codec()")
    return _codec
