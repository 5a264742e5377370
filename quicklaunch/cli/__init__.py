"""CLI module for quicklaunch."""
