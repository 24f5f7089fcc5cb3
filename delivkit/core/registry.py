"""YAML 注册表基类

基于 YAML 文件的注册表共享加载、保存、增删改查逻辑。
子类只需指定 section_key。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from delivkit.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)


class YamlRegistry:
    """YAML 文件注册表基类

    子类用法:
        class MyRegistry(YamlRegistry):
            section_key = "items"
    """

    section_key: str = "entries"

    def __init__(self, registry_file: str) -> None:
        self.registry_file = Path(registry_file)
        self._data: dict[str, Any] = load_yaml(self.registry_file)

    @staticmethod
    def _resolve_registry_file(registry_file: str, config_key: str) -> str:
        """为空时从 Config 解析注册表文件路径"""
        if registry_file:
            return registry_file
        from delivkit.core.config import get_config
        return str(getattr(get_config(), config_key))

    def _section(self) -> dict[str, dict[str, Any]]:
        """获取当前 section 字典（缺失或非映射时重置为空）"""
        result = self._data.get(self.section_key)
        if not isinstance(result, dict):
            if result is not None:
                logger.warning(
                    "%s 中 %s 不是映射 (实际类型: %s)，按空处理",
                    self.registry_file, self.section_key, type(result).__name__,
                )
            result = {}
            self._data[self.section_key] = result
        return result

    def _save(self) -> None:
        save_yaml(self.registry_file, self._data)

    def _put(self, name: str, entry: dict[str, Any]) -> dict[str, Any]:
        """写入条目并保存"""
        self._section()[name] = entry
        self._save()
        return entry

    def _get_raw(self, name: str) -> dict[str, Any] | None:
        entry = self._section().get(name)
        return entry if isinstance(entry, dict) else None

    def _list_raw(self) -> list[dict[str, Any]]:
        """列出所有条目（带 name 字段），跳过非映射条目"""
        return [
            {"name": k, **v} for k, v in self._section().items() if isinstance(v, dict)
        ]

    def _remove(self, name: str) -> bool:
        """删除条目"""
        section = self._section()
        if name not in section:
            return False
        del section[name]
        self._save()
        return True
