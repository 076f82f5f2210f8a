"""
Content versioning — immutable snapshots with dotted version numbers.

Versions of one content item strictly increase (1.0 → 1.1 → 2.0 → 2.0.1)
and exactly one of them is current. Rollback never rewrites history: it
restores an old snapshot and records it as a new, higher version.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from cms_backend.models.content_version import ContentVersion

logger = logging.getLogger('services.versioning')

VERSION_TYPES = ('major', 'minor', 'patch')


class VersioningError(Exception):
    """Invalid version request (unknown bump type, version of another item)."""


def parse_version(version: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in version.split('.'))


def next_version(latest: Optional[str], version_type: str = 'minor') -> str:
    if version_type not in VERSION_TYPES:
        raise VersioningError(f"Unknown version type: {version_type}")
    if not latest:
        return '1.0'

    parts = parse_version(latest)
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else 0
    patch = parts[2] if len(parts) > 2 else 0

    if version_type == 'major':
        return f"{major + 1}.0"
    if version_type == 'minor':
        return f"{major}.{minor + 1}"
    return f"{major}.{minor}.{patch + 1}"


def _is_empty(value) -> bool:
    return value is None or value == '' or value == [] or value == {}


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def diff_snapshots(old: Optional[Dict[str, Any]], new: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Field-level changes between two snapshots."""
    old = old or {}
    changes = []
    for name in sorted(set(old) | set(new)):
        before, after = old.get(name), new.get(name)
        if before == after:
            continue
        if _is_empty(before):
            change_type = 'added'
        elif _is_empty(after):
            change_type = 'deleted'
        else:
            change_type = 'modified'
        if change_type == 'added' and _is_empty(after):
            continue
        changes.append({
            'field': name,
            'change_type': change_type,
            'old_value': _as_text(before),
            'new_value': _as_text(after),
        })
    return changes


def snapshot_metrics(snapshot: Dict[str, Any]) -> Dict[str, int]:
    from cms_backend.blocks import parse_layout, layout_text
    from cms_backend.seo.analyzer import strip_tags

    text = ' '.join(filter(None, [
        strip_tags(snapshot.get('body') or ''),
        layout_text(parse_layout(snapshot.get('layout'))),
    ]))
    return {
        'word_count': len(text.split()),
        'character_count': len(' '.join(text.split())),
        'image_count': len(snapshot.get('images') or []),
        'link_count': len(snapshot.get('links') or []),
    }


def versions_of(session, item) -> List[ContentVersion]:
    """All versions of a content item, oldest first."""
    rows = session.query(ContentVersion).filter_by(
        content_type=item.content_type, content_id=str(item.id),
    ).all()
    return sorted(rows, key=lambda v: parse_version(v.version))


def current_version(session, item) -> Optional[ContentVersion]:
    return session.query(ContentVersion).filter_by(
        content_type=item.content_type, content_id=str(item.id), is_current=True,
    ).first()


def create_version(session, item, author: str = '', version_type: str = 'minor',
                   change_log: str = '') -> ContentVersion:
    """Snapshot the item's current state as its new current version."""
    history = versions_of(session, item)
    latest = history[-1] if history else None
    previous = current_version(session, item)

    snapshot = item.snapshot()
    version = ContentVersion(
        title=item.title,
        content_type=item.content_type,
        content_id=str(item.id),
        version=next_version(latest.version if latest else None, version_type),
        version_type=version_type,
        author=author or '',
        parent_version_id=previous.id if previous else None,
        content_snapshot=snapshot,
        changes=diff_snapshots(previous.content_snapshot if previous else None, snapshot),
        change_log=change_log,
        is_current=True,
        metrics=snapshot_metrics(snapshot),
    )
    for v in history:
        if v.is_current:
            v.is_current = False
    session.add(version)
    session.flush()
    logger.info("Content %s/%s now at version %s", item.content_type, item.id, version.version)
    return version


def rollback_to_version(session, item, version_id: int, author: str = '',
                        reason: str = '') -> ContentVersion:
    """Restore an earlier snapshot onto the item and record it as a new version."""
    target = session.get(ContentVersion, version_id)
    if target is None or target.content_type != item.content_type or target.content_id != str(item.id):
        raise VersioningError(f"Version {version_id} does not belong to {item.content_type} {item.id}")

    for name in item.SNAPSHOT_FIELDS:
        if name in target.content_snapshot:
            setattr(item, name, target.content_snapshot[name])

    log = f"Rolled back to version {target.version}"
    if reason:
        log += f": {reason}"
    logger.info("Rolling back %s/%s to version %s", item.content_type, item.id, target.version)
    return create_version(session, item, author=author, version_type='minor', change_log=log)


@dataclass
class VersionSummary:
    id: int
    version: str
    version_type: str
    author: str
    is_current: bool
    change_log: str
    changes: List[Dict[str, Any]]
    metrics: Dict[str, int]

    @classmethod
    def of(cls, v: ContentVersion) -> 'VersionSummary':
        return cls(
            id=v.id,
            version=v.version,
            version_type=v.version_type,
            author=v.author or '',
            is_current=bool(v.is_current),
            change_log=v.change_log or '',
            changes=list(v.changes or []),
            metrics=dict(v.metrics or {}),
        )
