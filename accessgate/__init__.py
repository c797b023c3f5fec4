"""Policy-based access control: models, policy adapters and enforcers."""

__version__ = "0.1.0"