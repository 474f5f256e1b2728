"""RSS 2.0 feed generation for the blog."""

__version__ = "1.0.0"
