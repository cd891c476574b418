"""webp-batch — 递归扫描目录，将 PNG/JPG 批量转换为 WebP"""

__version__ = "0.1.0"
