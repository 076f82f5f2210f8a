"""
Sitemap and robots.txt generation from published content.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape

logger = logging.getLogger('seo.sitemap')


# content_type → (path prefix, default changefreq, default priority)
CONTENT_DEFAULTS = {
    'page': ('/', 'weekly', 0.8),
    'post': ('/blog/', 'monthly', 0.6),
    'product': ('/products/', 'weekly', 0.7),
}

HOME_SLUG = 'home'
SITEMAP_LIMIT = 1000


@dataclass
class SitemapEntry:
    url: str
    changefreq: str
    priority: float
    lastmod: Optional[datetime] = None


def content_path(content_type: str, slug: str) -> str:
    prefix = CONTENT_DEFAULTS.get(content_type, ('/',))[0]
    return f"{prefix}{slug}"


class SitemapGenerator:
    """Collects sitemap entries for every published content item."""

    def __init__(self, session, base_url: str):
        self.session = session
        self.base_url = base_url.rstrip('/')

    def entries(self) -> List[SitemapEntry]:
        entries = [SitemapEntry(url=self.base_url, changefreq='daily', priority=1.0)]
        for content_type in CONTENT_DEFAULTS:
            entries.extend(self._entries_for(content_type))
        return entries

    def _entries_for(self, content_type: str) -> List[SitemapEntry]:
        from cms_backend.models.content_item import ContentItem
        from cms_backend.models.seo_record import SEORecord

        query = self.session.query(ContentItem).filter(
            ContentItem.content_type == content_type,
            ContentItem.status == 'published',
        )
        if content_type == 'page':
            query = query.filter(ContentItem.slug != HOME_SLUG)
        items = query.order_by(ContentItem.id).limit(SITEMAP_LIMIT).all()
        if not items:
            return []

        overrides = {
            r.content_id: r
            for r in self.session.query(SEORecord).filter(
                SEORecord.content_type == content_type,
                SEORecord.content_id.in_([str(i.id) for i in items]),
            )
        }

        _, changefreq, priority = CONTENT_DEFAULTS[content_type]
        entries = []
        for item in items:
            seo = overrides.get(str(item.id))
            if seo is not None and seo.include_in_sitemap is False:
                continue
            entries.append(SitemapEntry(
                url=f"{self.base_url}{content_path(content_type, item.slug)}",
                changefreq=(seo.change_frequency if seo and seo.change_frequency else changefreq),
                priority=(seo.priority if seo and seo.priority is not None else priority),
                lastmod=(seo.last_modified if seo and seo.last_modified else item.updated_at),
            ))
        logger.debug("Sitemap: %d %s entries", len(entries), content_type)
        return entries

    def generate(self) -> str:
        return render_sitemap(self.entries())


def render_sitemap(entries: List[SitemapEntry]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        lines.append('  <url>')
        lines.append(f'    <loc>{escape(entry.url)}</loc>')
        if entry.lastmod:
            lines.append(f'    <lastmod>{entry.lastmod.date().isoformat()}</lastmod>')
        lines.append(f'    <changefreq>{entry.changefreq}</changefreq>')
        lines.append(f'    <priority>{entry.priority:.1f}</priority>')
        lines.append('  </url>')
    lines.append('</urlset>')
    return '\n'.join(lines)


def generate_robots_txt(base_url: str, sitemap_url: str = None) -> str:
    base_url = base_url.rstrip('/')
    return '\n'.join([
        'User-agent: *',
        'Allow: /',
        '',
        'Disallow: /admin/',
        'Disallow: /api/',
        '',
        f"Sitemap: {sitemap_url or base_url + '/sitemap.xml'}",
        '',
    ])
