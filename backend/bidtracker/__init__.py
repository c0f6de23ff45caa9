"""bidtracker -- auction bid tracking backend."""

__version__ = "0.1.0"
