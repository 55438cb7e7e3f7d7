from .agent import SalesAgent
from .metric_definition import MetricDefinition
from .progress import ActionProgressRow, SkillsetProgressRow, RequirementProgressRow
from .target import SalesTarget

__all__ = [
    "SalesAgent",
    "MetricDefinition",
    "ActionProgressRow",
    "SkillsetProgressRow",
    "RequirementProgressRow",
    "SalesTarget",
]
