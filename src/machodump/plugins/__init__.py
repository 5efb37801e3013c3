"""Плагины отчёта, загружаются PluginManager"""
