"""Tests for cms_backend.seo.sitemap — sitemap.xml and robots.txt generation."""
from datetime import datetime, timezone

import pytest

from cms_backend.models.seo_record import SEORecord
from cms_backend.seo.sitemap import (
    SitemapEntry,
    SitemapGenerator,
    content_path,
    generate_robots_txt,
    render_sitemap,
)


def urls(entries):
    return [e.url for e in entries]


@pytest.fixture
def add_seo(db_session):
    def _add(item, **overrides):
        record = SEORecord(content_type=item.content_type, content_id=str(item.id), **overrides)
        db_session.add(record)
        db_session.commit()
        return record
    return _add


class TestContentPath:

    @pytest.mark.parametrize('content_type,expected', [
        ('page', '/pricing'),
        ('post', '/blog/pricing'),
        ('product', '/products/pricing'),
    ])
    def test_prefixes(self, content_type, expected):
        assert content_path(content_type, 'pricing') == expected


class TestSitemapGenerator:

    def test_root_entry_only_when_empty(self, db_session):
        entries = SitemapGenerator(db_session, 'https://example.com/').entries()
        assert len(entries) == 1
        assert entries[0].url == 'https://example.com'
        assert entries[0].changefreq == 'daily'
        assert entries[0].priority == 1.0

    def test_defaults_per_content_type(self, db_session, make_content_item):
        make_content_item(content_type='page', slug='about')
        make_content_item(content_type='post', slug='hello-world')
        make_content_item(content_type='product', slug='widget')

        entries = SitemapGenerator(db_session, 'https://example.com').entries()
        by_url = {e.url: e for e in entries}

        assert urls(entries)[0] == 'https://example.com'
        assert (by_url['https://example.com/about'].changefreq, by_url['https://example.com/about'].priority) == ('weekly', 0.8)
        assert (by_url['https://example.com/blog/hello-world'].changefreq,
                by_url['https://example.com/blog/hello-world'].priority) == ('monthly', 0.6)
        assert (by_url['https://example.com/products/widget'].changefreq,
                by_url['https://example.com/products/widget'].priority) == ('weekly', 0.7)

    def test_home_page_and_drafts_excluded(self, db_session, make_content_item):
        make_content_item(slug='home')
        make_content_item(slug='draft-page', status='draft')
        make_content_item(slug='pricing')

        assert urls(SitemapGenerator(db_session, 'https://example.com').entries()) == [
            'https://example.com',
            'https://example.com/pricing',
        ]

    def test_seo_record_can_exclude(self, db_session, make_content_item, add_seo):
        hidden = make_content_item(slug='internal')
        add_seo(hidden, include_in_sitemap=False)
        make_content_item(slug='visible')

        assert 'https://example.com/internal' not in urls(SitemapGenerator(db_session, 'https://example.com').entries())

    def test_unset_include_flag_keeps_entry(self, db_session, make_content_item, add_seo):
        item = make_content_item(slug='about')
        add_seo(item, include_in_sitemap=None)
        assert 'https://example.com/about' in urls(SitemapGenerator(db_session, 'https://example.com').entries())

    def test_seo_overrides_defaults(self, db_session, make_content_item, add_seo):
        item = make_content_item(content_type='post', slug='launch')
        modified = datetime(2026, 3, 1, tzinfo=timezone.utc)
        add_seo(item, change_frequency='daily', priority=0.9, last_modified=modified)

        entry = SitemapGenerator(db_session, 'https://example.com').entries()[1]
        assert entry.changefreq == 'daily'
        assert entry.priority == 0.9
        assert entry.lastmod.date() == modified.date()

    def test_zero_priority_override_respected(self, db_session, make_content_item, add_seo):
        item = make_content_item(slug='low')
        add_seo(item, priority=0.0)
        assert SitemapGenerator(db_session, 'https://example.com').entries()[1].priority == 0.0


class TestRenderSitemap:

    def test_xml_structure_and_escaping(self):
        xml = render_sitemap([
            SitemapEntry(url='https://example.com/a?x=1&y=2', changefreq='weekly', priority=0.8,
                         lastmod=datetime(2026, 1, 15, 10, 30)),
            SitemapEntry(url='https://example.com', changefreq='daily', priority=1),
        ])
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
        assert '<loc>https://example.com/a?x=1&amp;y=2</loc>' in xml
        assert '<lastmod>2026-01-15</lastmod>' in xml
        assert '<priority>0.8</priority>' in xml
        assert '<priority>1.0</priority>' in xml
        assert xml.count('<lastmod>') == 1
        assert xml.rstrip().endswith('</urlset>')

    def test_generate_includes_content(self, db_session, make_content_item):
        make_content_item(slug='about')
        xml = SitemapGenerator(db_session, 'https://example.com').generate()
        assert '<loc>https://example.com/about</loc>' in xml


class TestRobotsTxt:

    def test_rules_and_sitemap(self):
        robots = generate_robots_txt('https://example.com/')
        assert 'User-agent: *' in robots
        assert 'Allow: /' in robots
        assert 'Disallow: /admin/' in robots
        assert 'Disallow: /api/' in robots
        assert 'Sitemap: https://example.com/sitemap.xml' in robots

    def test_explicit_sitemap_url(self):
        robots = generate_robots_txt('https://example.com', sitemap_url='https://cdn.example.com/sm.xml')
        assert 'Sitemap: https://cdn.example.com/sm.xml' in robots
