"""
SEO heuristic analyzer — fixed checklist over one content document.

Each check is independent and only appends issues; none reads another's
outcome, so checks can be added or removed freely. The score starts at 100 and
loses a fixed penalty per issue severity, then is clamped to [0, 100].
Readability is computed separately from sentence and word lengths.
"""
import logging
import re
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger('seo.analyzer')


# ── Fixed thresholds ─────────────────────────────────────────────────────────

TITLE_MIN, TITLE_MAX = 50, 60
DESCRIPTION_MIN, DESCRIPTION_MAX = 150, 160
MIN_WORDS = 300
DENSITY_MIN, DENSITY_MAX = 0.5, 3.0      # percent
LONG_PARAGRAPH_WORDS = 150
FIRST_PARAGRAPH_CHARS = 200
URL_MAX_LENGTH = 100
URL_MAX_PARTS = 6

SEVERITY_PENALTIES = {'error': 15, 'warning': 8, 'info': 3}

READABILITY_SENTENCE_WORDS = 20
READABILITY_WORD_CHARS = 6
HEADING_BONUS_EACH, HEADING_BONUS_MAX = 2, 10

_HEADING_RE = re.compile(r'<h[1-6][^>]*>', re.IGNORECASE)
_H1_RE = re.compile(r'<h1[^>]*>', re.IGNORECASE)
_TAG_RE = re.compile(r'<[^>]+>')
_PARAGRAPH_SPLIT_RE = re.compile(r'</p>|<br\s*/?>', re.IGNORECASE)
_SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')


@dataclass
class SEOIssue:
    severity: str   # error/warning/info
    category: str
    message: str
    suggestion: Optional[str] = None


@dataclass
class ContentData:
    title: str = ''
    content: str = ''          # HTML body
    meta_title: str = ''
    meta_description: str = ''
    focus_keyword: str = ''
    url: str = ''
    images: List[Dict[str, Any]] = field(default_factory=list)  # [{src, alt}]
    links: List[Dict[str, Any]] = field(default_factory=list)   # [{href, text, is_internal}]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContentData':
        return cls(
            title=data.get('title') or '',
            content=data.get('content') or '',
            meta_title=data.get('meta_title') or '',
            meta_description=data.get('meta_description') or '',
            focus_keyword=data.get('focus_keyword') or '',
            url=data.get('url') or '',
            images=list(data.get('images') or []),
            links=list(data.get('links') or []),
        )


@dataclass
class SEOAnalysisResult:
    score: int
    raw_score: int
    penalty: int
    readability_score: int
    issues: List[SEOIssue]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def strip_tags(html: str) -> str:
    return _TAG_RE.sub(' ', html or '')


def words_of(text: str) -> List[str]:
    return text.split()


def severity_penalty(issues: List[SEOIssue]) -> int:
    return sum(SEVERITY_PENALTIES[i.severity] for i in issues)


def readability_score(html: str) -> int:
    """100 minus long-sentence and long-word penalties, plus a heading bonus."""
    text = strip_tags(html)
    words = words_of(text)
    if not words:
        return 0

    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    avg_sentence = len(words) / max(1, len(sentences))
    avg_word = sum(len(w) for w in words) / len(words)

    score = 100.0
    if avg_sentence > READABILITY_SENTENCE_WORDS:
        score -= (avg_sentence - READABILITY_SENTENCE_WORDS) * 2
    if avg_word > READABILITY_WORD_CHARS:
        score -= (avg_word - READABILITY_WORD_CHARS) * 5

    headings = len(_HEADING_RE.findall(html or ''))
    if headings:
        score += min(HEADING_BONUS_MAX, headings * HEADING_BONUS_EACH)

    return max(0, min(100, round(score)))


class SEOAnalyzer:
    """Runs every check against one ContentData and aggregates the result."""

    def __init__(self, content: ContentData):
        self.content = content
        self.keyword = (content.focus_keyword or '').strip().lower()
        self.issues: List[SEOIssue] = []

    # Order only affects the order issues are listed in
    CHECKS = (
        'check_title',
        'check_meta_description',
        'check_body',
        'check_keywords',
        'check_images',
        'check_links',
        'check_url',
    )

    def analyze(self) -> SEOAnalysisResult:
        self.issues = []
        for name in self.CHECKS:
            getattr(self, name)()

        penalty = severity_penalty(self.issues)
        raw = 100 - penalty
        return SEOAnalysisResult(
            score=max(0, min(100, raw)),
            raw_score=raw,
            penalty=penalty,
            readability_score=readability_score(self.content.content),
            issues=list(self.issues),
            recommendations=[i.suggestion for i in self.issues if i.suggestion],
        )

    def add(self, severity: str, category: str, message: str, suggestion: str = None):
        self.issues.append(SEOIssue(severity, category, message, suggestion))

    # ── Checks ────────────────────────────────────────────────────────────

    def check_title(self):
        title = self.content.meta_title or self.content.title
        if not title:
            self.add('error', 'title', 'Missing title tag', 'Add a descriptive title tag')
            return

        if len(title) < TITLE_MIN:
            self.add('warning', 'title', 'Title tag is too short', f'Aim for {TITLE_MIN}-{TITLE_MAX} characters')
        elif len(title) > TITLE_MAX:
            self.add('warning', 'title', 'Title tag is too long', f'Keep it under {TITLE_MAX} characters')

        if self.keyword and self.keyword not in title.lower():
            self.add('warning', 'title', 'Focus keyword not in title', 'Include your focus keyword in the title')

        counts = Counter(title.lower().split())
        if any(count > 2 and len(word) > 3 for word, count in counts.items()):
            self.add('warning', 'title', 'Possible keyword stuffing in title', 'Avoid repeating keywords too often')

    def check_meta_description(self):
        description = self.content.meta_description
        if not description:
            self.add('error', 'description', 'Missing meta description', 'Add a compelling meta description')
            return

        if len(description) < DESCRIPTION_MIN:
            self.add('warning', 'description', 'Meta description is too short',
                     f'Aim for {DESCRIPTION_MIN}-{DESCRIPTION_MAX} characters')
        elif len(description) > DESCRIPTION_MAX:
            self.add('warning', 'description', 'Meta description is too long',
                     f'Keep it under {DESCRIPTION_MAX} characters')

        if self.keyword and self.keyword not in description.lower():
            self.add('info', 'description', 'Focus keyword not in meta description',
                     'Consider including your focus keyword')

    def check_body(self):
        html = self.content.content
        if not html:
            self.add('error', 'content', 'No content found', 'Add meaningful content to your page')
            return

        if len(words_of(strip_tags(html))) < MIN_WORDS:
            self.add('warning', 'content', 'Content is too short',
                     f'Aim for at least {MIN_WORDS} words for better SEO')

        if not _HEADING_RE.search(html):
            self.add('warning', 'content', 'No headings found',
                     'Use headings (H1, H2, H3) to structure your content')

        h1_count = len(_H1_RE.findall(html))
        if h1_count == 0:
            self.add('warning', 'content', 'No H1 tag found', 'Add an H1 tag to your content')
        elif h1_count > 1:
            self.add('warning', 'content', 'Multiple H1 tags found', 'Use only one H1 tag per page')

        paragraphs = _PARAGRAPH_SPLIT_RE.split(html)
        if any(len(words_of(strip_tags(p))) > LONG_PARAGRAPH_WORDS for p in paragraphs):
            self.add('info', 'content', 'Some paragraphs are very long',
                     'Break up long paragraphs for better readability')

    def check_keywords(self):
        if not self.keyword:
            self.add('info', 'keywords', 'No focus keyword set', 'Set a focus keyword to optimize for')
            return

        text = strip_tags(self.content.content).lower()
        words = words_of(text)
        occurrences = sum(1 for w in words if self.keyword in w or w in self.keyword)
        density = (occurrences / len(words) * 100) if words else 0.0

        if density < DENSITY_MIN:
            self.add('warning', 'keywords', 'Keyword density is too low',
                     'Use your focus keyword more naturally in the content')
        elif density > DENSITY_MAX:
            self.add('warning', 'keywords', 'Keyword density is too high',
                     'Reduce keyword usage to avoid over-optimization')

        if self.keyword not in ' '.join(words)[:FIRST_PARAGRAPH_CHARS]:
            self.add('info', 'keywords', 'Focus keyword not in first paragraph',
                     'Include your focus keyword early in the content')

    def check_images(self):
        images = self.content.images
        if not images:
            self.add('info', 'images', 'No images found', 'Add relevant images to enhance your content')
            return

        missing_alt = [img for img in images if not (img.get('alt') or '').strip()]
        if missing_alt:
            self.add('error', 'images', f'{len(missing_alt)} images missing alt text',
                     'Add descriptive alt text to all images')

        if self.keyword and not any(self.keyword in (img.get('alt') or '').lower() for img in images):
            self.add('info', 'images', 'Focus keyword not in any image alt text',
                     'Consider including your focus keyword in at least one image alt text')

    def check_links(self):
        links = self.content.links
        if not links:
            self.add('info', 'links', 'No links found', 'Add relevant internal and external links')
            return

        if not any(link.get('is_internal') for link in links):
            self.add('warning', 'links', 'No internal links found', 'Add internal links to related content')
        if all(link.get('is_internal') for link in links):
            self.add('info', 'links', 'No external links found',
                     'Consider linking to authoritative external sources')
        if any(not (link.get('text') or '').strip() for link in links):
            self.add('warning', 'links', 'Links with empty anchor text',
                     'Use descriptive anchor text for all links')

    def check_url(self):
        url = self.content.url
        if not url:
            self.add('info', 'technical', 'No URL provided for analysis')
            return

        if len(url) > URL_MAX_LENGTH:
            self.add('warning', 'technical', 'URL is too long',
                     f'Keep URLs under {URL_MAX_LENGTH} characters when possible')
        if self.keyword and self.keyword.replace(' ', '-') not in url.lower() and self.keyword not in url.lower():
            self.add('info', 'technical', 'Focus keyword not in URL',
                     'Consider including your focus keyword in the URL')
        if len(url.split('/')) > URL_MAX_PARTS:
            self.add('info', 'technical', 'URL has many levels', 'Consider simplifying the URL structure')
        if '_' in url:
            self.add('info', 'technical', 'URL contains underscores', 'Use hyphens instead of underscores in URLs')


def analyze(content: ContentData) -> SEOAnalysisResult:
    return SEOAnalyzer(content).analyze()


# ── Persistence ──────────────────────────────────────────────────────────────

def analyze_and_store(session, content_type: str, content_id, content: ContentData) -> SEOAnalysisResult:
    """
    Analyze content and upsert its SEORecord.

    The stored issue list is replaced, never merged with the previous run.
    """
    from cms_backend.models.seo_record import SEORecord

    result = analyze(content)
    record = session.query(SEORecord).filter_by(
        content_type=content_type, content_id=str(content_id),
    ).first()
    if record is None:
        record = SEORecord(
            title=f"SEO Analysis - {content.title or content_id}",
            content_type=content_type,
            content_id=str(content_id),
            url=content.url or '',
        )
        session.add(record)

    record.seo_score = result.score
    record.readability_score = result.readability_score
    record.issues = [asdict(i) for i in result.issues]
    record.last_analyzed = datetime.now(timezone.utc)
    session.flush()
    logger.info("SEO analysis for %s/%s: score=%d readability=%d issues=%d",
                content_type, content_id, result.score, result.readability_score, len(result.issues))
    return result


def content_data_from_item(item, base_url: str = '') -> ContentData:
    """Build analyzer input from a ContentItem, including text of its layout blocks."""
    from cms_backend.blocks import parse_layout, layout_text
    from cms_backend.seo.sitemap import content_path

    meta = item.meta or {}
    body = item.body or ''
    block_text = layout_text(parse_layout(item.layout))
    if block_text:
        body = body + ''.join(f'<p>{para}</p>' for para in block_text.split('\n\n'))

    return ContentData(
        title=item.title or '',
        content=body,
        meta_title=meta.get('title') or '',
        meta_description=meta.get('description') or '',
        focus_keyword=meta.get('focus_keyword') or '',
        url=f"{base_url.rstrip('/')}{content_path(item.content_type, item.slug)}",
        images=list(item.images or []),
        links=list(item.links or []),
    )


# ── Structured data ──────────────────────────────────────────────────────────

DEFAULT_SCHEMA_TYPES = {
    'post': 'BlogPosting',
    'page': 'WebPage',
    'product': 'Product',
}


def generate_structured_data(content_type: str, content: ContentData, schema_type: str = None,
                             organization: str = 'Your Organization',
                             published_at: datetime = None, modified_at: datetime = None) -> Dict[str, Any]:
    """schema.org JSON-LD for a content item."""
    schema_type = schema_type or DEFAULT_SCHEMA_TYPES.get(content_type, 'WebPage')
    data = {'@context': 'https://schema.org', '@type': schema_type}
    now = datetime.now(timezone.utc)

    if schema_type in ('Article', 'BlogPosting'):
        org = {'@type': 'Organization', 'name': organization}
        data.update({
            'headline': content.meta_title or content.title,
            'description': content.meta_description,
            'url': content.url,
            'datePublished': (published_at or now).isoformat(),
            'dateModified': (modified_at or now).isoformat(),
            'author': org,
            'publisher': org,
        })
    elif schema_type == 'WebPage':
        data.update({
            'name': content.meta_title or content.title,
            'description': content.meta_description,
            'url': content.url,
        })
    elif schema_type == 'Product':
        data.update({
            'name': content.title,
            'description': content.meta_description,
            'url': content.url,
        })
    return data
