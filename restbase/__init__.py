"""restbase — scaffold REST API projects, all or nothing."""

__version__ = "0.1.0"
