"""
Utility modules for the knowledge crawler.
"""

from .config import Config, ConfigManager, LoggingConfig, MonitoringConfig, load_config, get_config
from .logger import setup_logging, get_crawler_logger
from .monitoring import CrawlMetrics

__all__ = [
    'Config', 'ConfigManager', 'LoggingConfig', 'MonitoringConfig', 'load_config', 'get_config',
    'setup_logging', 'get_crawler_logger',
    'CrawlMetrics'
]
