"""Skill reference parsing and resolution.

Required skills on scenario allocations, and skills listed on proposed new
resources, are stored as lists of skill references. A reference is a tagged
variant:

- ``{"id": 12}``        refers to a skill by id
- ``{"name": "React"}`` refers to a skill by name, resolved later against
  the skills reference table (case-insensitive)

Older rows may still hold serialized text, so reading is tolerant: JSON
strings are decoded, and malformed text or unrecognised entries are skipped.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkillRef:
    """Reference to a skill, either by id or by name."""
    skill_id: Optional[int] = None
    name: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.skill_id is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.skill_id is not None:
            return {"id": self.skill_id}
        return {"name": self.name}


@dataclass(frozen=True)
class SkillInfo:
    """Row of the skills reference table."""
    id: int
    name: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "category": self.category}


def _ref_from_entry(entry: Any) -> Optional[SkillRef]:
    """Convert one list entry into a SkillRef, or None if unrecognised."""
    # bool is an int subclass; never a skill id
    if isinstance(entry, bool):
        return None
    if isinstance(entry, int):
        return SkillRef(skill_id=entry)
    if isinstance(entry, str):
        name = entry.strip()
        return SkillRef(name=name) if name else None
    if isinstance(entry, dict):
        skill_id = entry.get("id")
        if isinstance(skill_id, int) and not isinstance(skill_id, bool):
            return SkillRef(skill_id=skill_id)
        if isinstance(skill_id, str) and skill_id.isdigit():
            return SkillRef(skill_id=int(skill_id))
        name = entry.get("name")
        if isinstance(name, str) and name.strip():
            return SkillRef(name=name.strip())
    return None


def parse_skill_refs(raw: Any) -> List[SkillRef]:
    """Parse a stored skills value into skill references.

    Accepts None, a list, or serialized JSON text. Anything that cannot be
    interpreted is skipped rather than raising.
    """
    if raw is None or raw == "":
        return []

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Skipping malformed skills value: {raw[:80]!r}")
            return []

    if isinstance(raw, (dict, int, str)):
        raw = [raw]

    if not isinstance(raw, list):
        logger.warning(f"Skipping skills value of unexpected type {type(raw).__name__}")
        return []

    refs = []
    for entry in raw:
        ref = _ref_from_entry(entry)
        if ref is not None:
            refs.append(ref)
    return refs


def normalize_skill_refs(raw: Any) -> Optional[List[Dict[str, Any]]]:
    """Normalize an incoming skills value into the stored tagged form.

    Returns None when nothing usable was supplied, so the column stays NULL.
    """
    refs = parse_skill_refs(raw)
    if not refs:
        return None
    seen = []
    for ref in refs:
        item = ref.to_dict()
        if item not in seen:
            seen.append(item)
    return seen


def resolve_skill_ids(refs: Iterable[SkillRef], skills: List[SkillInfo]) -> Set[int]:
    """Resolve references to ids of skills present in the reference table."""
    by_id = {s.id for s in skills}
    by_name = {s.name.lower(): s.id for s in skills if s.name}

    resolved = set()
    for ref in refs:
        if ref.skill_id is not None:
            if ref.skill_id in by_id:
                resolved.add(ref.skill_id)
        elif ref.name:
            skill_id = by_name.get(ref.name.lower())
            if skill_id is not None:
                resolved.add(skill_id)
    return resolved
