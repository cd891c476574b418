"""配置与常量"""

from pathlib import Path

# ========================================================================
# 转换配置
# ========================================================================

# 默认压缩质量（0-100）
DEFAULT_QUALITY = 80

# 质量取值范围
MIN_QUALITY = 0
MAX_QUALITY = 100

# 需要转换的源文件扩展名（区分大小写的后缀匹配）
SOURCE_EXTENSIONS = (".png", ".jpg")

# 目标文件扩展名
TARGET_EXTENSION = ".webp"

# 默认编码后端
DEFAULT_CODEC = "pillow"

# cwebp 可执行文件名
CWEBP_BINARY = "cwebp"

# ========================================================================
# 路径配置
# ========================================================================

# 默认扫描目录（相对当前工作目录）
DEFAULT_ROOT_DIR = Path("assets")

# 用户配置目录
CONFIG_DIR = Path.home() / ".webp-batch"
