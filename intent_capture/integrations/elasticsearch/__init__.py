# intent_capture/integrations/elasticsearch/__init__.py
"""Elasticsearch integration package."""

from .provider import ElasticsearchStore

__all__ = ['ElasticsearchStore']
