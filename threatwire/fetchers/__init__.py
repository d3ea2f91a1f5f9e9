"""Fetcher implementations for RSS/Atom feeds."""

from .rss import FeedError, FeedItem, ParsedFeed, fetch_feed, parse_feed

__all__ = ["FeedError", "FeedItem", "ParsedFeed", "fetch_feed", "parse_feed"]
