"""
AI content generation gateway — OpenAI chat completions for editors.

The client is passed in (built by create_app() and kept in app.extensions),
so nothing here holds a module-level connection. Generation failures raise
ContentGenerationError; improve/translate/suggestion calls degrade to the
original input instead.
"""
import json
import logging
import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from cms_backend.services.pricing import estimate_cost, load_pricing

logger = logging.getLogger('services.content_generator')


class ContentGenerationError(Exception):
    """The upstream model call failed or returned nothing usable."""


LANGUAGE_NAMES = {
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'nl': 'Dutch',
    'ru': 'Russian',
    'zh': 'Chinese',
    'ja': 'Japanese',
}

IMPROVEMENT_TYPES = ('seo', 'readability', 'engagement', 'grammar')

_HEADING_RE = re.compile(r'<h[1-6]|^#+\s', re.MULTILINE)
_SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')


def language_name(code: Optional[str]) -> str:
    return LANGUAGE_NAMES.get(code or 'en', 'English')


def _keyword_list(value) -> List[str]:
    """Keywords from a JSON list or a comma-separated string."""
    if isinstance(value, str):
        return [k.strip() for k in value.split(',') if k.strip()]
    if not isinstance(value, list):
        raise TypeError('keywords must be a list or a comma-separated string')
    return [str(k) for k in value]


def _optional_int(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError('expected a number')
    return int(value)


@dataclass
class GenerationRequest:
    type: str
    user_prompt: str
    system_prompt: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    tone: Optional[str] = None
    target_audience: Optional[str] = None
    word_count: Optional[int] = None
    language: Optional[str] = None
    focus_keyword: Optional[str] = None
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000
    top_p: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationRequest':
        """Build from a camelCase or snake_case JSON body."""
        def pick(*names, default=None):
            for name in names:
                if data.get(name) not in (None, ''):
                    return data[name]
            return default

        return cls(
            type=pick('type', default=''),
            user_prompt=pick('userPrompt', 'user_prompt', 'prompt', default=''),
            system_prompt=pick('systemPrompt', 'system_prompt'),
            keywords=_keyword_list(pick('keywords', default=[])),
            tone=pick('tone'),
            target_audience=pick('targetAudience', 'target_audience'),
            word_count=_optional_int(pick('wordCount', 'word_count')),
            language=pick('language'),
            focus_keyword=pick('focusKeyword', 'focus_keyword'),
            model=pick('model'),
            temperature=float(pick('temperature', default=0.7)),
            max_tokens=int(pick('maxTokens', 'max_tokens', default=2000)),
            top_p=float(pick('topP', 'top_p', default=1.0)),
        )


@dataclass
class GenerationResult:
    content: str
    tokens_used: int
    estimated_cost: float
    quality_score: int
    readability_score: int
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_suggestions: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ── Prompt building ──────────────────────────────────────────────────────────

def build_system_prompt(req: GenerationRequest) -> str:
    parts = [f"You are a professional content writer specializing in {req.type.replace('_', ' ')}."]
    if req.tone:
        parts.append(f"Write in a {req.tone} tone.")
    if req.target_audience:
        parts.append(f"Target audience: {req.target_audience}.")
    if req.language and req.language != 'en':
        parts.append(f"Write in {language_name(req.language)}.")
    if req.keywords:
        parts.append(f"Include these keywords naturally: {', '.join(req.keywords)}.")
    if req.focus_keyword:
        parts.append(f'Focus keyword for SEO: "{req.focus_keyword}". Use it naturally throughout the content.')
    if req.word_count:
        parts.append(f"Target word count: approximately {req.word_count} words.")
    parts.append("Create high-quality, engaging, and original content. "
                 "Use proper formatting with headings, paragraphs, and lists where appropriate.")

    prompt = ' '.join(parts)
    if req.system_prompt:
        prompt += f"\n\nAdditional instructions: {req.system_prompt}"
    return prompt


def improvement_prompt(improvement_type: str, focus_keyword: Optional[str] = None) -> str:
    if improvement_type == 'seo':
        keyword = f' Focus on the keyword "{focus_keyword}".' if focus_keyword else ''
        return ("You are an SEO expert. Improve the provided content for better search engine optimization."
                f"{keyword} Maintain the original meaning and structure while optimizing for SEO.")
    if improvement_type == 'readability':
        return ("You are a content editor focused on readability. Improve the provided content to make it "
                "more readable and accessible. Use shorter sentences, simpler words where appropriate, "
                "and better paragraph structure.")
    if improvement_type == 'engagement':
        return ("You are a content strategist focused on engagement. Improve the provided content to make it "
                "more engaging and compelling. Add hooks, improve flow, and make it more interesting to read.")
    if improvement_type == 'grammar':
        return ("You are a professional editor. Improve the grammar, spelling, and overall writing quality "
                "of the provided content. Maintain the original tone and meaning.")
    return "Improve the provided content for better quality and effectiveness."


# ── Local scoring ────────────────────────────────────────────────────────────

def quality_score(content: str, req: GenerationRequest) -> int:
    score = 100.0

    if req.word_count:
        actual = len(content.split())
        if abs(actual - req.word_count) / req.word_count > 0.2:
            score -= 10

    if req.keywords:
        lowered = content.lower()
        included = sum(1 for k in req.keywords if k.lower() in lowered)
        score = score - 20 + (included / len(req.keywords)) * 20

    if not _HEADING_RE.search(content):
        score -= 5
    if len(content.split('\n\n')) <= 1:
        score -= 5

    return max(0, min(100, round(score)))


def readability_score(content: str) -> int:
    words = content.split()
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    if not words or not sentences:
        return 0

    avg_sentence = len(words) / len(sentences)
    avg_word = sum(len(w) for w in words) / len(words)

    score = 100.0
    if avg_sentence > 20:
        score -= (avg_sentence - 20) * 2
    if avg_word > 6:
        score -= (avg_word - 6) * 5
    return max(0, min(100, round(score)))


# ── Gateway ──────────────────────────────────────────────────────────────────

class ContentGenerator:
    """Wraps an OpenAI client with the editor-facing generation operations."""

    def __init__(self, client, default_model: str = 'gpt-4', pricing: dict = None):
        self.client = client
        self.default_model = default_model
        self.pricing = pricing if pricing is not None else load_pricing()

    def _complete(self, system: str, user: str, temperature: float, max_tokens: int,
                  model: str = None, json_mode: bool = False, **kwargs):
        if self.client is None:
            raise ContentGenerationError('OpenAI client is not configured')
        if json_mode:
            kwargs['response_format'] = {'type': 'json_object'}
        return self.client.chat.completions.create(
            model=model or self.default_model,
            messages=[
                {'role': 'system', 'content': system},
                {'role': 'user', 'content': user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    @staticmethod
    def _text(response) -> str:
        if not response.choices:
            return ''
        return response.choices[0].message.content or ''

    def generate(self, req: GenerationRequest) -> GenerationResult:
        model = req.model or self.default_model
        try:
            response = self._complete(
                build_system_prompt(req), req.user_prompt,
                temperature=req.temperature, max_tokens=req.max_tokens,
                model=model, top_p=req.top_p,
            )
        except ContentGenerationError:
            raise
        except Exception as e:
            logger.error("Content generation failed (model=%s): %s", model, e)
            raise ContentGenerationError('Failed to generate content') from e

        content = self._text(response)
        tokens = response.usage.total_tokens if response.usage else 0
        result = GenerationResult(
            content=content,
            tokens_used=tokens,
            estimated_cost=estimate_cost(model, tokens, self.pricing),
            quality_score=quality_score(content, req),
            readability_score=readability_score(content),
        )

        if req.focus_keyword:
            meta = self.seo_metadata(content, req.focus_keyword, req.language)
            result.meta_title = meta['meta_title']
            result.meta_description = meta['meta_description']
            result.seo_suggestions = meta['suggestions']

        logger.info("Generated %s content: %d tokens, $%.4f", req.type, tokens, result.estimated_cost)
        return result

    def improve(self, content: str, improvement_type: str, focus_keyword: str = None) -> str:
        try:
            response = self._complete(
                improvement_prompt(improvement_type, focus_keyword),
                f"Improve this content:\n\n{content}",
                temperature=0.3, max_tokens=3000,
            )
            return self._text(response) or content
        except Exception as e:
            logger.error("Content improvement (%s) failed: %s", improvement_type, e)
            return content

    def translate(self, content: str, language: str, preserve_formatting: bool = True) -> str:
        style = ('Preserve all HTML formatting, links, and structure.' if preserve_formatting
                 else 'Focus on natural, fluent translation.')
        system = (f"You are a professional translator. Translate the following content to "
                  f"{LANGUAGE_NAMES.get(language, language)}. {style} Maintain the original tone and style.")
        try:
            response = self._complete(system, content, temperature=0.3, max_tokens=4000)
            return self._text(response) or content
        except Exception as e:
            logger.error("Translation to %s failed: %s", language, e)
            return content

    def seo_suggestions(self, content: str, focus_keyword: str, title: str = None,
                        description: str = None) -> List[Dict[str, Any]]:
        system = (f'You are an SEO expert. Analyze the provided content and generate specific, actionable '
                  f'SEO improvement suggestions. Focus on the keyword "{focus_keyword}". Respond in JSON.')
        user = f"""Content: {content}
Focus Keyword: {focus_keyword}
Current Title: {title or 'Not provided'}
Current Description: {description or 'Not provided'}

Respond in JSON:
{{
  "suggestions": [
    {{
      "type": "keyword|readability|structure|meta",
      "suggestion": "Specific actionable suggestion",
      "priority": "high|medium|low"
    }}
  ]
}}"""
        try:
            response = self._complete(system, user, temperature=0.2, max_tokens=1000, json_mode=True)
            parsed = json.loads(self._text(response) or '{}')
        except Exception as e:
            logger.error("SEO suggestions failed for %r: %s", focus_keyword, e)
            return []

        if isinstance(parsed, list):
            return parsed
        return list(parsed.get('suggestions') or [])

    def seo_metadata(self, content: str, focus_keyword: str, language: str = None) -> Dict[str, Any]:
        """Meta title/description for generated content; empty values on failure."""
        lang = f" Language: {language_name(language)}." if language else ''
        system = (f'You are an SEO expert. Generate optimized meta title and description for the provided '
                  f'content. Focus keyword: "{focus_keyword}".{lang} Respond in JSON.')
        user = f"""Content: {content[:1000]}...
Focus Keyword: {focus_keyword}

Respond in JSON:
{{
  "metaTitle": "SEO-optimized title (50-60 characters)",
  "metaDescription": "SEO-optimized description (150-160 characters)",
  "suggestions": [
    {{"type": "meta", "suggestion": "Specific suggestion", "priority": "high|medium|low"}}
  ]
}}"""
        empty = {'meta_title': '', 'meta_description': '', 'suggestions': []}
        try:
            response = self._complete(system, user, temperature=0.3, max_tokens=500, json_mode=True)
            parsed = json.loads(self._text(response) or '{}')
        except Exception as e:
            logger.warning("SEO metadata generation failed: %s", e)
            return empty

        if not isinstance(parsed, dict):
            return empty
        return {
            'meta_title': parsed.get('metaTitle') or '',
            'meta_description': parsed.get('metaDescription') or '',
            'suggestions': list(parsed.get('suggestions') or []),
        }
