"""quicklaunch - frecency-ranked application launcher core."""

__version__ = "0.1.0"
__logo__ = "🚀"
