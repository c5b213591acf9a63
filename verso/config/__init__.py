from .loader import DEFAULT_CONFIG_TEMPLATE, load_config

__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "load_config",
]
