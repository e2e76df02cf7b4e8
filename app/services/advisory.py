"""
Advisory rule engine.

Evaluates an ordered rule set against a WeatherObservation and fills two
independent slots — planting and pesticide. For each slot the first matching
rule (ascending priority, ties in declaration order) that carries a message
for that slot wins. No match is a normal outcome: both slots stay None.

The process-wide rule set is built once (see get_rule_set) and never mutated,
so evaluate() is safe to call from any number of concurrent requests.
"""
import logging
from functools import lru_cache
from typing import Iterable, Optional

from app.core.config import settings
from app.schemas.advisory import AdvisoryResult, AdvisoryRuleRead
from app.schemas.weather import WeatherObservation
from app.services.advisory_rules import AdvisoryRule, default_rules, load_rules

logger = logging.getLogger(__name__)


class RuleSet:
    """Immutable, priority-ordered collection of advisory rules."""

    def __init__(self, rules: Iterable[AdvisoryRule]):
        # sorted() is stable, so equal priorities keep declaration order
        self._rules: tuple[AdvisoryRule, ...] = tuple(sorted(rules, key=lambda r: r.priority))

    @property
    def rules(self) -> tuple[AdvisoryRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def evaluate(self, observation: WeatherObservation) -> AdvisoryResult:
        planting: Optional[str] = None
        pesticide: Optional[str] = None

        for rule in self._rules:
            if not rule.predicate(observation):
                continue
            if planting is None and rule.planting is not None:
                planting = rule.planting
                logger.debug("rule %s filled planting slot", rule.name)
            if pesticide is None and rule.pesticide is not None:
                pesticide = rule.pesticide
                logger.debug("rule %s filled pesticide slot", rule.name)
            if planting is not None and pesticide is not None:
                break

        return AdvisoryResult(planting=planting, pesticide=pesticide)

    def describe(self) -> list[AdvisoryRuleRead]:
        return [
            AdvisoryRuleRead(
                name=r.name,
                priority=r.priority,
                predicate=r.describe(),
                planting=r.planting,
                pesticide=r.pesticide,
            )
            for r in self._rules
        ]


@lru_cache(maxsize=1)
def get_rule_set() -> RuleSet:
    """
    Return the process-wide rule set.

    Built on first call from settings.ADVISORY_RULES_PATH when set, otherwise
    from the built-in table. Raises RuleConfigError for a bad rule file.
    """
    if settings.ADVISORY_RULES_PATH:
        rules = load_rules(settings.ADVISORY_RULES_PATH)
    else:
        rules = default_rules()
    rule_set = RuleSet(rules)
    logger.info("advisory rule set ready — %d rules", len(rule_set))
    return rule_set


def evaluate(observation: WeatherObservation, rules: Optional[RuleSet] = None) -> AdvisoryResult:
    """Evaluate observation against rules (default: the process-wide rule set)."""
    if rules is None:
        rules = get_rule_set()
    return rules.evaluate(observation)
