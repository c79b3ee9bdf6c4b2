"""StudyVerse - session core for AI-generated study artifacts."""

__version__ = "0.1.0"
