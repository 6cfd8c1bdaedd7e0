"""
Level tag parsing.

OSM indoor data carries level information in several tags:
- level=1, level=0;1;3, level=-1-2, level=1.5
- repeat_on=1-4 (same geometry repeated on several levels)
- min_level / max_level
- buildingpart:verticalpassage:floorrange on vertical passages
- building:levels (+ roof:levels, building:levels:underground) on buildings
- type=level and type=multipolygon relations the feature is a member of

Two different readings are needed. Feature placement (which levels a
feature appears on) accepts every syntax above. Vertical connectors
(stairs, elevators, ramps) only link levels for the narrow "a-b" and
"a;b;c" syntaxes, see connector_chain().
"""

from __future__ import annotations

import logging
import math
import re
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

Level = Union[int, float]

_LANDUSE_AMENITIES = frozenset({"school", "university", "college", "hospital"})

_NUMBER = r"-?\d+(?:\.\d+)?"
_SEMICOLON_LIST = re.compile(rf"^{_NUMBER}(?:;{_NUMBER})*$")
_COMMA_LIST = re.compile(rf"^{_NUMBER}(?:,{_NUMBER})*$")
_INTERVAL = re.compile(r"^(-?\d+)-(-?\d+)$")
_TO_INTERVAL = re.compile(r"^(?:\w+ )?(-?\d+) to (-?\d+)$")

# A lone single digit somewhere in the tag ("1", "2 "): the feature sits on one level
_SINGLE_DIGIT = re.compile(r"(?<!\S)\d(?!\S)")
# Connector ranges only accept non-negative integers
_CONNECTOR_RANGE = re.compile(r"^(\d+)-(\d+)$")


def normalize_level(value: Union[str, int, float]) -> Level:
    """
    Normalize a level value so equal levels hash equally.

    Integral values become int, others stay float ("1", 1.0 and 1 are all 1).

    Raises:
        ValueError: If the value is not a finite number
    """
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Level must be finite, got {value!r}")
    if number.is_integer():
        return int(number)
    return number


def parse_levels(value: Optional[str]) -> Optional[list[Level]]:
    """
    Parse a level expression into a sorted list of levels.

    Args:
        value: Tag value such as "1", "0;2", "-1-3" or "-2 to 1"

    Returns:
        Sorted list of levels, or None if the value cannot be parsed
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None

    if _SEMICOLON_LIST.match(value):
        return sorted(normalize_level(v) for v in value.split(";"))
    if _COMMA_LIST.match(value):
        return sorted(normalize_level(v) for v in value.split(","))

    match = _INTERVAL.match(value) or _TO_INTERVAL.match(value)
    if match is None:
        return None

    low, high = sorted((int(match.group(1)), int(match.group(2))))
    return list(range(low, high + 1))


def is_landuse(tags: Mapping[str, str]) -> bool:
    """True for areal features (campus, landuse, boundary) that sit on no level."""
    return bool(
        tags.get("landuse")
        or tags.get("amenity") in _LANDUSE_AMENITIES
        or tags.get("boundary")
        or tags.get("disused:boundary")
        or (tags.get("leisure") == "sports_centre" and not tags.get("building"))
    )


def relation_levels(relations: Optional[list]) -> Optional[list[Level]]:
    """
    Levels inherited from the relations a feature is a member of.

    Relations come in osmtogeojson form: {"rel": id, "role": ..., "reltags": {...}}.
    A type=level relation places the feature on exactly one level, a
    type=multipolygon relation on every level of its level tag.
    """
    levels: set[Level] = set()
    for relation in relations or []:
        if not isinstance(relation, Mapping):
            continue
        reltags = relation.get("reltags") or {}
        if "level" not in reltags:
            continue
        parsed = parse_levels(reltags.get("level"))
        if not parsed:
            continue
        if reltags.get("type") == "level":
            if len(parsed) != 1:
                logger.warning(
                    f"Level relation has no unique level: {reltags.get('level')}",
                    extra={"feature_id": relation.get("rel")},
                )
                continue
            levels.add(parsed[0])
        elif reltags.get("type") == "multipolygon":
            levels.update(parsed)
    return sorted(levels) if levels else None


def feature_levels(
    tags: Mapping[str, str],
    default: Optional[list[Level]] = None,
    relations: Optional[list] = None,
) -> list[Level]:
    """
    Compute the levels a feature is placed on from its tags.

    Args:
        tags: OSM tag map
        default: Levels to use when no level information is present
        relations: osmtogeojson relation memberships of the feature

    Returns:
        Sorted, de-duplicated list of levels. Empty for landuse-like
        features without level information.
    """
    if default is None:
        default = [0]

    levels: Optional[list[Level]] = None

    if "level" in tags and "repeat_on" in tags:
        from_level = parse_levels(tags.get("level"))
        from_repeat = parse_levels(tags.get("repeat_on"))
        if from_level is not None or from_repeat is not None:
            levels = sorted(set(from_level or []) | set(from_repeat or []))
    elif "level" in tags:
        levels = parse_levels(tags.get("level"))
    elif "repeat_on" in tags:
        levels = parse_levels(tags.get("repeat_on"))
    elif "min_level" in tags and "max_level" in tags:
        levels = parse_levels(f"{tags['min_level']} to {tags['max_level']}")
    elif "buildingpart:verticalpassage:floorrange" in tags:
        levels = parse_levels(tags.get("buildingpart:verticalpassage:floorrange"))
    elif "building:levels" in tags:
        levels = _building_levels(tags)

    if not levels and relations:
        levels = relation_levels(relations)

    if not levels:
        if is_landuse(tags):
            return []
        return list(default)
    return sorted(set(levels))


def _building_levels(tags: Mapping[str, str]) -> Optional[list[Level]]:
    """Levels implied by building:levels, roof:levels and building:levels:underground."""
    try:
        above = math.ceil(float(tags["building:levels"]))
        roof = math.ceil(float(tags.get("roof:levels", 0)))
        below = math.ceil(float(tags.get("building:levels:underground", 0)))
    except (TypeError, ValueError):
        return None

    top = above + roof - 1
    if top < -below:
        return None
    return list(range(-below, top + 1))


def is_single_level_tag(level_tag: Optional[str]) -> bool:
    """True when the level tag contains a lone single digit (e.g. "1")."""
    if level_tag is None:
        return False
    return _SINGLE_DIGIT.search(str(level_tag)) is not None


def connector_chain(level_spec: Optional[str]) -> list[Level]:
    """
    Levels a vertical connector links, in linking order.

    Consecutive entries of the returned list are joined by an edge:
    - "1-4" gives [1, 2, 3, 4]
    - "1;3;5" gives [1, 3, 5] (listed values only, in the given order)
    - negative ranges ("-4--1"), reversed ranges and anything else give []
    """
    if level_spec is None:
        return []
    value = str(level_spec).strip()

    match = _CONNECTOR_RANGE.match(value)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start >= end:
            return []
        return list(range(start, end + 1))

    if ";" in value:
        try:
            return [normalize_level(part) for part in value.split(";")]
        except ValueError:
            return []

    return []
