"""Configuration module for the sheet export engine."""

from .settings import ExportConfig, AppConfig, export_config, app_config

__all__ = ["ExportConfig", "AppConfig", "export_config", "app_config"]
