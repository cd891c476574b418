"""用户配置持久化管理 — 保存到 ~/.webp-batch/config.json"""

import json
from typing import Any, Optional

from webp_batch.config import CONFIG_DIR, MAX_QUALITY, MIN_QUALITY

CONFIG_FILE = CONFIG_DIR / "config.json"


def normalize_extension(ext: str) -> str:
    """'webp' / '.webp' / ' .webp ' -> '.webp'（保留大小写）"""
    if not isinstance(ext, str):
        raise ValueError(f"扩展名必须是字符串: {ext!r}")
    ext = ext.strip()
    if not ext or ext == ".":
        raise ValueError("扩展名不能为空")
    return ext if ext.startswith(".") else f".{ext}"


def parse_extensions(value: str) -> tuple[str, ...]:
    """'png, .jpg' -> ('.png', '.jpg')，去重并保持顺序"""
    if not isinstance(value, str):
        raise ValueError(f"扩展名列表必须是逗号分隔的字符串: {value!r}")
    exts = [normalize_extension(part) for part in value.split(",") if part.strip()]
    if not exts:
        raise ValueError("扩展名列表不能为空")
    return tuple(dict.fromkeys(exts))


def _quality(value: str) -> int:
    quality = int(value)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(f"质量必须在 {MIN_QUALITY}-{MAX_QUALITY} 之间: {quality}")
    return quality


def _source_exts(value: str) -> str:
    return ",".join(e.lstrip(".") for e in parse_extensions(value))


def _target_ext(value: str) -> str:
    return normalize_extension(value).lstrip(".")


# 允许持久化的配置项及其类型转换
ALLOWED_KEYS = {
    "quality": _quality,
    "source_exts": _source_exts,
    "target_ext": _target_ext,
    "codec": str,
}

# CLI 参数名 -> 配置文件 key 的映射（处理连字符）
CLI_KEY_MAP = {
    "quality": "quality",
    "source-exts": "source_exts",
    "target-ext": "target_ext",
    "codec": "codec",
}


class UserSettings:
    """读写 ~/.webp-batch/config.json 的管理器"""

    def __init__(self) -> None:
        self._data: dict[str, Any] = self._load()

    # ------------------------------------------------------------------
    # 读写
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        if CONFIG_FILE.exists():
            try:
                return json.loads(CONFIG_FILE.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                return {}
        return {}

    def _save(self) -> None:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(
            json.dumps(self._data, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )

    # ------------------------------------------------------------------
    # 公共 API
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """获取某项配置值，不存在返回 None"""
        return self._data.get(CLI_KEY_MAP.get(key, key))

    def all(self) -> dict[str, Any]:
        """返回所有已保存的配置"""
        return dict(self._data)

    def set(self, key: str, value: str) -> Any:
        """设置配置项，自动做类型转换与校验。返回转换后的值。"""
        canon_key = CLI_KEY_MAP.get(key, key)
        if canon_key not in ALLOWED_KEYS:
            raise KeyError(
                f"不支持的配置项 '{key}'，可选: {', '.join(sorted(CLI_KEY_MAP.keys()))}"
            )
        converted = ALLOWED_KEYS[canon_key](value)
        self._data[canon_key] = converted
        self._save()
        return converted

    def remove(self, key: str) -> bool:
        """删除某项配置，返回是否存在并已删除"""
        canon_key = CLI_KEY_MAP.get(key, key)
        if canon_key in self._data:
            del self._data[canon_key]
            self._save()
            return True
        return False

    def clear(self) -> int:
        """清除所有配置，返回清除的条目数"""
        count = len(self._data)
        self._data.clear()
        self._save()
        return count


# ------------------------------------------------------------------
# 便捷函数：解析最终值（命令行 > 配置文件 > 默认值）
# ------------------------------------------------------------------

_settings = None


def _get_settings() -> UserSettings:
    global _settings
    if _settings is None:
        _settings = UserSettings()
    return _settings


def _resolve(key: str, cli_value: Any, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    saved = _get_settings().get(key)
    return saved if saved is not None else default


def resolve_quality(cli_value: Optional[int], default: int) -> int:
    """解析 quality 的最终值"""
    value = _resolve("quality", cli_value, default)
    try:
        return int(value)
    except TypeError as e:
        raise ValueError(f"质量必须是整数: {value!r}") from e


def resolve_source_exts(cli_value: Optional[str], default: tuple[str, ...]) -> tuple[str, ...]:
    """解析源扩展名列表，返回带点的元组"""
    value = _resolve("source_exts", cli_value, None)
    return parse_extensions(value) if value is not None else default


def resolve_target_ext(cli_value: Optional[str], default: str) -> str:
    """解析目标扩展名，返回带点的形式"""
    value = _resolve("target_ext", cli_value, None)
    return normalize_extension(value) if value is not None else default


def resolve_codec(cli_value: Optional[str], default: str) -> str:
    """解析编码器名称"""
    return _resolve("codec", cli_value, default)
