"""EngageForge — XP, level and badge rule engine for community activity."""

__version__ = "0.1.0"
