from .client import FeedIncidentSource

__all__ = ["FeedIncidentSource"]
