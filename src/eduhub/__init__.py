"""EduHub enrollment core: admission control and student role transitions."""

__version__ = "1.0.0"
