"""Version information for git-housekeeper."""

__version__ = "0.3.0"
