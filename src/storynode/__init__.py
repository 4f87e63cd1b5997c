"""StoryNode story graph runtime."""

__version__ = "0.1.0"
