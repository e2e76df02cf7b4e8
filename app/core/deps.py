from typing import Annotated

from fastapi import Depends, HTTPException, status

from app.services.advisory import RuleSet, get_rule_set
from app.services.advisory_rules import RuleConfigError


async def get_rules() -> RuleSet:
    try:
        return get_rule_set()
    except RuleConfigError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Advisory rules unavailable: {exc}",
        )


Rules = Annotated[RuleSet, Depends(get_rules)]
