import importlib
import inspect
import logging
import os
from typing import Dict, List, Optional, Type

from rich.console import Console

from .model import Image
from .plugin_base import ReportPlugin

logger = logging.getLogger(__name__)

PLUGIN_PACKAGE = "machodump.plugins"


class PluginManager:
    """Менеджер для загрузки и управления плагинами отчёта"""

    def __init__(self):
        self.plugins: Dict[str, Type[ReportPlugin]] = {}

    def load_plugins(self, package: str = PLUGIN_PACKAGE) -> None:
        """Загружает все плагины из указанного пакета"""
        plugin_dir = os.path.dirname(importlib.import_module(package).__file__)

        for file in sorted(os.listdir(plugin_dir)):
            if file.endswith(".py") and not file.startswith("__"):
                module = importlib.import_module(f"{package}.{file[:-3]}")
                for name, obj in inspect.getmembers(module, inspect.isclass):
                    if issubclass(obj, ReportPlugin) and obj is not ReportPlugin:
                        self.register_plugin(obj)

    def register_plugin(self, plugin_class: Type[ReportPlugin]) -> None:
        """Регистрирует новый плагин"""
        name = plugin_class.get_name()
        logger.debug("Зарегистрирован плагин %s", name)
        self.plugins[name] = plugin_class

    def get_plugin(self, name: str) -> Optional[Type[ReportPlugin]]:
        """Получает плагин по имени"""
        return self.plugins.get(name)

    def get_available_plugins(self) -> List[str]:
        """Возвращает список доступных плагинов"""
        return list(self.plugins.keys())

    def get_plugin_info(self, plugin_name: str) -> Dict[str, str]:
        """Возвращает информацию о плагине"""
        plugin_class = self.get_plugin(plugin_name)
        if plugin_class:
            return {
                "name": plugin_class.get_name(),
                "description": plugin_class.get_description(),
                "version": plugin_class.get_version()
            }
        return {}

    def instantiate_plugin(self, plugin_name: str, image: Image, console: Console) -> Optional[ReportPlugin]:
        """Создает экземпляр плагина"""
        plugin_class = self.get_plugin(plugin_name)
        if plugin_class:
            return plugin_class(image, console)
        return None
