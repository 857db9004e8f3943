"""
Medication Interaction Rules

A small static table of known high-risk medication pairs. Lookup is
case-insensitive, ignores surrounding whitespace and does not depend on the
order of the two names.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class InteractionRule(BaseModel):
    drugs: Tuple[str, str]
    risky: bool
    reason: str
    advice: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class InteractionResult(BaseModel):
    pair: Tuple[str, str]
    is_potentially_risky: bool
    reason: str
    advice: str

    model_config = ConfigDict(extra="forbid", frozen=True)


INTERACTION_RULES: Tuple[InteractionRule, ...] = (
    InteractionRule(
        drugs=("warfarin", "ibuprofen"),
        risky=True,
        reason="increased bleeding risk",
        advice="avoid combo; consult clinician; prefer acetaminophen for pain relief",
    ),
    InteractionRule(
        drugs=("metformin", "contrast dye"),
        risky=True,
        reason="lactic acidosis risk around imaging contrast",
        advice="hold metformin per imaging protocol",
    ),
    InteractionRule(
        drugs=("lisinopril", "spironolactone"),
        risky=True,
        reason="hyperkalemia risk",
        advice="monitor potassium, consult clinician",
    ),
)

NO_INTERACTION_REASON = "No known interaction found"
NO_INTERACTION_ADVICE = (
    "No specific interaction warnings found in our database. However, always "
    "consult with a healthcare professional before combining medications."
)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def find_interaction(med_a: str, med_b: str) -> Optional[InteractionRule]:
    wanted = {normalize_name(med_a), normalize_name(med_b)}
    for rule in INTERACTION_RULES:
        if {d.lower() for d in rule.drugs} == wanted:
            return rule
    return None


def check_interaction(med_a: str, med_b: str) -> InteractionResult:
    rule = find_interaction(med_a, med_b)
    if rule is None:
        return InteractionResult(
            pair=(med_a, med_b),
            is_potentially_risky=False,
            reason=NO_INTERACTION_REASON,
            advice=NO_INTERACTION_ADVICE,
        )

    return InteractionResult(
        pair=(med_a, med_b),
        is_potentially_risky=rule.risky,
        reason=rule.reason,
        advice=rule.advice,
    )
