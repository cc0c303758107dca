"""HTTP service for recording user subscriptions and summing their cost."""

__version__ = "1.0.0"