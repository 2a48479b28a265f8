from runq.config.settings import (
    LoggingConfig,
    RunQSettings,
    get_settings,
    load_settings,
    reset_settings,
)

__all__ = ["LoggingConfig", "RunQSettings", "get_settings", "load_settings", "reset_settings"]
