from .settings import Settings, BlockConfig, get_settings, resolve_timezone

__all__ = ['Settings', 'BlockConfig', 'get_settings', 'resolve_timezone']
