"""LUMIN - gamified journaling, goals and AI coaching"""

__version__ = "1.0.0"
