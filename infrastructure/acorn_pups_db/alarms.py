"""
Alarm Threshold Policy
======================
What we alarm on, and how sensitive each alarm is. The monitoring stack turns
these rules into CloudWatch alarms; the evaluator below reproduces the
CloudWatch decision so the policy can be tested without deploying.

States:
  OK     → fewer breaching windows than the rule needs
  ALARM  → the last `evaluation_periods` windows all breached

Sensitivity:
  Throttles      ≥ 1 in each of 2 consecutive 5-minute windows. On-demand
                 tables throttle briefly while they scale; one window is noise.
  System errors  ≥ 1 in a single window. Service-side errors do not heal.

Missing data is NOT_BREACHING: a table with no traffic reports nothing, and
that must not page anyone.
"""
from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .logger import get_logger

logger = get_logger(__name__)

PERIOD_MINUTES = 5
STATISTIC = "Sum"
NAMESPACE = "AWS/DynamoDB"


class AlarmState(str, Enum):
    OK = "OK"
    ALARM = "ALARM"


class ComparisonOperator(str, Enum):
    GREATER_THAN_OR_EQUAL_TO_THRESHOLD = "GreaterThanOrEqualToThreshold"
    GREATER_THAN_THRESHOLD = "GreaterThanThreshold"


class MissingDataPolicy(str, Enum):
    NOT_BREACHING = "notBreaching"
    BREACHING = "breaching"


class AlarmRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_name: str
    suffix: str  # alarm name suffix and construct id stem
    description: str
    threshold: float = 1
    evaluation_periods: int = Field(ge=1)
    comparison: ComparisonOperator = ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD
    missing_data: MissingDataPolicy = MissingDataPolicy.NOT_BREACHING

    @property
    def construct_suffix(self) -> str:
        """'read-throttle' -> 'ReadThrottle'"""
        return "".join(part.title() for part in self.suffix.split("-"))

    def is_breaching(self, value: float | None) -> bool:
        if value is None:
            return self.missing_data == MissingDataPolicy.BREACHING
        if self.comparison == ComparisonOperator.GREATER_THAN_THRESHOLD:
            return value > self.threshold
        return value >= self.threshold


READ_THROTTLE_RULE = AlarmRule(
    metric_name="ReadThrottles",
    suffix="read-throttle",
    description="Read throttling detected on {table} table",
    evaluation_periods=2,
)
WRITE_THROTTLE_RULE = AlarmRule(
    metric_name="WriteThrottles",
    suffix="write-throttle",
    description="Write throttling detected on {table} table",
    evaluation_periods=2,
)
ERROR_RULE = AlarmRule(
    metric_name="SystemErrors",
    suffix="system-errors",
    description="System errors detected on {table} table",
    evaluation_periods=1,
)

THROTTLE_RULES: tuple[AlarmRule, ...] = (READ_THROTTLE_RULE, WRITE_THROTTLE_RULE)
ALARM_RULES: tuple[AlarmRule, ...] = THROTTLE_RULES + (ERROR_RULE,)


def evaluate(rule: AlarmRule, windows: Sequence[float | None]) -> AlarmState:
    """
    State after the given windows (oldest first). Only the newest
    `evaluation_periods` windows count; fewer windows than that is OK.
    """
    recent = list(windows)[-rule.evaluation_periods:]
    if len(recent) < rule.evaluation_periods:
        return AlarmState.OK
    if all(rule.is_breaching(value) for value in recent):
        return AlarmState.ALARM
    return AlarmState.OK


class AlarmTracker:
    """
    Two-state machine for one (table, metric) pair, fed one window at a time.

    Parameters
    ----------
    rule:   the threshold rule to apply
    table:  entity name, used only for log context
    """

    def __init__(self, rule: AlarmRule, table: str = ""):
        self.rule = rule
        self.table = table
        self.state = AlarmState.OK
        self._windows: deque[float | None] = deque(maxlen=rule.evaluation_periods)

    def observe(self, value: float | None) -> AlarmState:
        self._windows.append(value)
        new_state = evaluate(self.rule, self._windows)
        if new_state != self.state:
            logger.info(
                "Alarm state changed",
                extra={
                    "table": self.table,
                    "metric": self.rule.metric_name,
                    "from_state": self.state.value,
                    "to_state": new_state.value,
                },
            )
            self.state = new_state
        return self.state

    def observe_all(self, values: Iterable[float | None]) -> list[AlarmState]:
        return [self.observe(value) for value in values]
