"""Numbering definitions: abstract lists, their levels and numbering instances."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional

from .properties import PropertySet


@dataclass
class Level:
    level: int
    start: Optional[int] = None
    number_format: str = "decimal"
    level_text: str = ""
    paragraph_style: Optional[str] = None
    suffix: str = "tab"
    justification: Optional[str] = None
    paragraph_properties: PropertySet = field(default_factory=PropertySet)
    run_properties: PropertySet = field(default_factory=PropertySet)


@dataclass
class AbstractNumbering:
    abstract_id: int
    levels: Dict[int, Level] = field(default_factory=dict)
    multi_level_type: Optional[str] = None


@dataclass
class LevelOverride:
    level: int
    start_override: Optional[int] = None
    replacement: Optional[Level] = None


@dataclass
class NumberingInstance:
    num_id: int
    abstract_id: int
    overrides: Dict[int, LevelOverride] = field(default_factory=dict)


class NumberingDefinitions:
    """Abstract numbering definitions and ``w:num`` instances, both keyed by id."""

    def __init__(
        self,
        abstracts: Iterable[AbstractNumbering] = (),
        instances: Iterable[NumberingInstance] = (),
    ):
        self.abstracts: Dict[int, AbstractNumbering] = {a.abstract_id: a for a in abstracts}
        self.instances: Dict[int, NumberingInstance] = {n.num_id: n for n in instances}

    def instance(self, num_id: Optional[int]) -> Optional[NumberingInstance]:
        if num_id is None or num_id <= 0:
            return None
        return self.instances.get(num_id)

    def abstract_for(self, num_id: Optional[int]) -> Optional[AbstractNumbering]:
        instance = self.instance(num_id)
        if instance is None:
            return None
        return self.abstracts.get(instance.abstract_id)

    def level(self, num_id: Optional[int], ilvl: int) -> Optional[Level]:
        """Level definition for an instance, with ``lvlOverride/lvl`` applied."""
        instance = self.instance(num_id)
        abstract = self.abstract_for(num_id)
        if instance is None or abstract is None:
            return None
        base = abstract.levels.get(ilvl)
        override = instance.overrides.get(ilvl)
        if override is not None and override.replacement is not None:
            if base is None:
                return override.replacement
            replacement = override.replacement
            return replace(
                base,
                start=replacement.start if replacement.start is not None else base.start,
                number_format=replacement.number_format or base.number_format,
                level_text=replacement.level_text or base.level_text,
                suffix=replacement.suffix or base.suffix,
                paragraph_properties=replacement.paragraph_properties or base.paragraph_properties,
                run_properties=replacement.run_properties or base.run_properties,
            )
        return base
