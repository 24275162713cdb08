"""Scheduled newsletter orchestration for the East v. West fantasy league."""

__version__ = "0.3.0"
