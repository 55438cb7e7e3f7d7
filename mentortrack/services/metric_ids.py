"""
Catalog position <-> remote metric id.

The catalog addresses a metric by its zero-based position in its kind's
list; the remote service addresses the same metric by an absolute id:

    action       id = position + 1
    skillset     id = position + 8
    requirement  id = position + 1

Every crossing between the two spaces goes through this module.
"""
from mentortrack.core.errors import UnknownMetricError
from mentortrack.schemas.catalog import MetricKind

ID_OFFSETS: dict[MetricKind, int] = {
    MetricKind.action: 1,
    MetricKind.skillset: 8,
    MetricKind.requirement: 1,
}


def to_absolute_id(kind: MetricKind, position: int) -> int:
    if position < 0:
        raise UnknownMetricError(kind.value, position, "position must be >= 0")
    return position + ID_OFFSETS[kind]


def to_position(kind: MetricKind, absolute_id: int) -> int:
    position = absolute_id - ID_OFFSETS[kind]
    if position < 0:
        raise UnknownMetricError(kind.value, position, f"remote id {absolute_id} is below the {kind.value} range")
    return position
