"""Application wiring."""

from quicklaunch.app.context import LauncherContext, UnknownPluginError

__all__ = ["LauncherContext", "UnknownPluginError"]
