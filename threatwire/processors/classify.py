from __future__ import annotations

from typing import List

from ..models import CYBERSECURITY, DEFENSE, GENERAL, TECH, Source

# Exact feed URLs; the three groups are disjoint.
CYBERSECURITY_SOURCES = (
    "https://www.bleepingcomputer.com/feed/",
    "https://feeds.feedburner.com/TheHackersNews",
    "https://blogs.cisco.com/security/feed",
    "https://www.wired.com/feed/category/security/latest/rss",
    "https://www.securityweek.com/feed/",
    "https://news.sophos.com/en-us/feed/",
    "https://www.csoonline.com/feed/",
)

TECH_SOURCES = (
    "https://www.theverge.com/rss/index.xml",
    "https://techcrunch.com/feed/",
    "https://arstechnica.com/feed/",
    "http://www.engadget.com/rss-full.xml",
    "http://www.fastcodesign.com/rss.xml",
    "http://www.forbes.com/entrepreneurs/index.xml",
    "https://blog.pragmaticengineer.com/rss/",
    "https://browser.engineering/rss.xml",
    "https://githubengineering.com/atom.xml",
    "https://joshwcomeau.com/rss.xml",
    "https://jvns.ca/atom.xml",
    "https://overreacted.io/rss.xml",
    "https://signal.org/blog/rss.xml",
    "https://slack.engineering/feed",
    "https://stripe.com/blog/feed.rss",
)

DEFENSE_SOURCES = (
    "https://www.defenseone.com/rss/all/",
    "https://thediplomat.com/category/asia-defense/feed/",
    "https://www.janes.com/osint-insights/defence-news/feed/",
    "https://www.militarytimes.com/arc/outboundfeeds/news-rss/",
    "https://www.defensenews.com/arc/outboundfeeds/home-rss/",
)

_CATEGORY_BY_SOURCE = {
    **{url: CYBERSECURITY for url in CYBERSECURITY_SOURCES},
    **{url: TECH for url in TECH_SOURCES},
    **{url: DEFENSE for url in DEFENSE_SOURCES},
}


def classify_source(source_url: str) -> str:
    """Return the category label for a feed URL; unknown feeds are ``General``."""
    return _CATEGORY_BY_SOURCE.get(source_url, GENERAL)


def default_sources() -> List[Source]:
    """Built-in feed list used when no sources file is configured."""
    return [Source(name=url, url=url) for url in _CATEGORY_BY_SOURCE]
