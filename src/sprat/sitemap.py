"""
Generators for sitemap.xml and robots.txt.
"""
from __future__ import annotations

import typing as t
from datetime import date
from urllib.parse import quote
from xml.sax.saxutils import escape

from .core import Asset, FilterFunc
from .filters import without_meta

if t.TYPE_CHECKING:
    from collections.abc import Iterable
    from .core import Assets


SITEMAP_PATH = '/sitemap.xml'
ROBOTS_PATH = '/robots.txt'
SITEMAP_EXCLUDE_KEY = 'SitemapExclude'

# First present key wins.
LASTMOD_KEYS = ('SitemapLastModified', 'LastModified', 'Modified', 'Date')
PRIORITY_KEYS = ('SitemapPriority', 'Priority')
CHANGEFREQ_KEYS = ('SitemapChangeFreq', 'ChangeFreq')

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
URLSET_OPEN = '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
URLSET_CLOSE = '</urlset>'
ROBOTS_HEADER = 'User-agent: *\nDisallow: /\n'


def _first_present(meta: dict[str, t.Any], keys: Iterable[str]):
    for key in keys:
        if key in meta:
            return meta[key]
    return None


def format_lastmod(value: t.Any) -> str | None:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def format_priority(value: t.Any) -> str | None:
    """
    Render a priority given as a number or numeric string with one decimal
    place. Anything else is ignored.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)):
        return f'{value:.1f}'
    return None


def format_changefreq(value: t.Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def sitemap_entry(base_url: str, asset: Asset):
    """
    Render the `<url>` element for one Asset.
    """
    meta = asset.meta or {}
    parts = ['<url>', f'<loc>{escape(base_url.rstrip("/") + quote(asset.path))}</loc>']
    fields = [
        ('lastmod', format_lastmod(_first_present(meta, LASTMOD_KEYS))),
        ('priority', format_priority(_first_present(meta, PRIORITY_KEYS))),
        ('changefreq', format_changefreq(_first_present(meta, CHANGEFREQ_KEYS))),
    ]
    for tag, value in fields:
        if value is not None:
            parts.append(f'<{tag}>{escape(value)}</{tag}>')
    parts.append('</url>')
    return ''.join(parts)


def build_sitemap(assets: Assets, base_url: str, *filters: FilterFunc) -> Asset | None:
    """
    Build a sitemap Asset listing every Asset not flagged with
    `SitemapExclude` and matching @filters, in collection order. Returns None
    for an empty collection.
    """
    if not assets:
        return None

    selected = assets.filter(without_meta(SITEMAP_EXCLUDE_KEY), *filters)
    body = ''.join(sitemap_entry(base_url, asset) for asset in selected)
    return Asset(
        SITEMAP_PATH,
        XML_HEADER + URLSET_OPEN + body + URLSET_CLOSE,
        {'ContentType': 'application/xml'},
    )


def build_robots_txt(assets: Assets, *lines: str) -> Asset | None:
    """
    Build a robots.txt Asset which disallows everything, followed by @lines.
    Returns None for an empty collection.
    """
    if not assets:
        return None

    return Asset(
        ROBOTS_PATH,
        ROBOTS_HEADER + ''.join(f'{line}\n' for line in lines),
        {'ContentType': 'text/plain'},
    )
