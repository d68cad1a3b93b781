"""Publish KubeSphere workspace resource quotas to Kafka."""

__version__ = "1.0.0"
