"""tasknav: locate Markdown tasks and reveal them in a document view."""

__version__ = "0.3.0"
