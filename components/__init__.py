"""Components package for the server supervisor."""

from .config import ConfigError, WardenConfig, load_config
from .config_watcher import ConfigWatcher
from .crash_guard import CrashWatchdog
from .notifier import DiscordNotifier
from .schedule import ScheduleWindow
from .shutdown_notices import ShutdownNotices

__all__ = [
    'ConfigError',
    'ConfigWatcher',
    'CrashWatchdog',
    'DiscordNotifier',
    'ScheduleWindow',
    'ShutdownNotices',
    'WardenConfig',
    'load_config',
]
