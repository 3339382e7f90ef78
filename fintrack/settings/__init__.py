"""Report settings files and loaders.

Settings are stored in JSON files next to this module so thresholds and
chart styling can be changed without code changes.
"""

from .loader import get_config_value, get_report_config, load_config

__all__ = ['get_config_value', 'get_report_config', 'load_config']
