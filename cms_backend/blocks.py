"""
Layout blocks — one dataclass per block kind.

Pages store their layout as a JSON list of dicts tagged by `block_type`.
parse_layout() turns that list into typed blocks and rejects unknown kinds or
blocks missing required fields, so downstream code never has to probe dicts.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union


class BlockValidationError(ValueError):
    """Raised when a layout block is malformed."""

    def __init__(self, message, index=None):
        self.index = index
        if index is not None:
            message = f"block {index}: {message}"
        super().__init__(message)


@dataclass
class CallToAction:
    text: str
    url: str


@dataclass
class HeroBlock:
    title: str
    subtitle: str
    highlight_text: str = ''
    primary_cta: Optional[CallToAction] = None
    secondary_cta: Optional[CallToAction] = None
    disclaimer: str = 'No credit card required'
    block_type: str = field(default='hero', init=False)

    def text(self) -> str:
        return '\n'.join(p for p in (self.title, self.highlight_text, self.subtitle) if p)


@dataclass
class Feature:
    title: str
    description: str
    icon: str = ''
    highlight: bool = False


@dataclass
class FeaturesBlock:
    title: str
    features: List[Feature]
    subtitle: str = ''
    block_type: str = field(default='features', init=False)

    def text(self) -> str:
        lines = [self.title]
        if self.subtitle:
            lines.append(self.subtitle)
        for feature in self.features:
            lines.append(feature.title)
            lines.append(feature.description)
        return '\n'.join(lines)


@dataclass
class Company:
    name: str
    logo: str
    url: str = ''


@dataclass
class SocialProofBlock:
    companies: List[Company]
    title: str = ''
    block_type: str = field(default='social_proof', init=False)

    def text(self) -> str:
        return self.title


@dataclass
class ContentBlock:
    content: str
    block_type: str = field(default='content', init=False)

    def text(self) -> str:
        return self.content


Block = Union[HeroBlock, FeaturesBlock, SocialProofBlock, ContentBlock]


def _require(data: Dict[str, Any], key: str, index: int) -> Any:
    if not isinstance(data, dict):
        raise BlockValidationError(f"expected an object holding '{key}'", index)
    value = data.get(key)
    if value is None or value == '' or value == []:
        raise BlockValidationError(f"missing required field '{key}'", index)
    return value


def _require_list(data: Dict[str, Any], key: str, index: int) -> List[Dict[str, Any]]:
    items = _require(data, key, index)
    if not isinstance(items, list):
        raise BlockValidationError(f"'{key}' must be a list", index)
    for item in items:
        if not isinstance(item, dict):
            raise BlockValidationError(f"every entry of '{key}' must be an object", index)
    return items


def _cta(data: Optional[Dict[str, Any]], index: int) -> Optional[CallToAction]:
    if not data:
        return None
    if not isinstance(data, dict):
        raise BlockValidationError("call to action must be an object", index)
    return CallToAction(text=_require(data, 'text', index), url=_require(data, 'url', index))


def _parse_hero(data, index) -> HeroBlock:
    return HeroBlock(
        title=_require(data, 'title', index),
        subtitle=_require(data, 'subtitle', index),
        highlight_text=data.get('highlight_text', ''),
        primary_cta=_cta(data.get('primary_cta'), index),
        secondary_cta=_cta(data.get('secondary_cta'), index),
        disclaimer=data.get('disclaimer', 'No credit card required'),
    )


def _parse_features(data, index) -> FeaturesBlock:
    features = []
    for item in _require_list(data, 'features', index):
        features.append(Feature(
            title=_require(item, 'title', index),
            description=_require(item, 'description', index),
            icon=_require(item, 'icon', index),
            highlight=bool(item.get('highlight', False)),
        ))
    return FeaturesBlock(
        title=_require(data, 'title', index),
        subtitle=data.get('subtitle', ''),
        features=features,
    )


def _parse_social_proof(data, index) -> SocialProofBlock:
    companies = [
        Company(name=_require(c, 'name', index), logo=_require(c, 'logo', index), url=c.get('url', ''))
        for c in _require_list(data, 'companies', index)
    ]
    return SocialProofBlock(title=data.get('title', ''), companies=companies)


def _parse_content(data, index) -> ContentBlock:
    return ContentBlock(content=_require(data, 'content', index))


BLOCK_PARSERS = {
    'hero': _parse_hero,
    'features': _parse_features,
    'social_proof': _parse_social_proof,
    'content': _parse_content,
}


def parse_block(data: Dict[str, Any], index: int = None) -> Block:
    """Parse one serialized block into its typed variant."""
    if not isinstance(data, dict):
        raise BlockValidationError("block must be an object", index)
    block_type = data.get('block_type')
    parser = BLOCK_PARSERS.get(block_type)
    if parser is None:
        raise BlockValidationError(f"unknown block_type '{block_type}'", index)
    return parser(data, index)


def parse_layout(layout: Optional[List[Dict[str, Any]]]) -> List[Block]:
    return [parse_block(data, idx) for idx, data in enumerate(layout or [])]


def serialize_layout(blocks: List[Block]) -> List[Dict[str, Any]]:
    return [asdict(block) for block in blocks]


def layout_text(blocks: List[Block]) -> str:
    """Plain text of all blocks, one block per paragraph."""
    return '\n\n'.join(t for t in (block.text() for block in blocks) if t)
