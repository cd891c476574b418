"""异常定义 — 区分可局部恢复的错误与致命的启动错误"""

from pathlib import Path


class WebpBatchError(Exception):
    """所有 webp-batch 错误的基类"""


class CodecError(WebpBatchError):
    """编码器处理单个文件失败（源文件损坏、格式不支持、写入失败等）"""

    def __init__(self, message: str, output: str = ""):
        self.message = message
        self.output = output
        super().__init__(message)


class ConversionError(WebpBatchError):
    """单个文件转换失败，在 Converter 内部被捕获并记录"""

    def __init__(self, source: Path, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class DirectoryReadError(WebpBatchError):
    """目录无法列出（不存在、无权限、不是目录），只影响该子树"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class FatalSetupError(WebpBatchError):
    """启动阶段的致命错误：根目录不可用、编码器不可用、参数非法"""
