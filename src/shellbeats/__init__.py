"""shellbeats - search YouTube and play music from the terminal."""

__version__ = "0.2.0"
