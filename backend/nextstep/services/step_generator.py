"""Rule-based micro-step generation.

Resolution order, first hit wins:

1. an explicit template id (user templates shadow built-ins with the same id);
2. the best-scoring template by name/category match;
3. five generic steps that quote the task title.
"""
from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from nextstep.api.schemas.task import MicroStep
from nextstep.api.schemas.template import StepBlueprint, TaskTemplate
from nextstep.services.template_library import TEMPLATE_LIBRARY

NAME_MATCH_SCORE = 10
CATEGORY_MATCH_SCORE = 5

SMALLER_STEP_TEXTS: Tuple[str, ...] = (
    "Just do 30 seconds of it.",
    "Put one thing in place.",
    "Do the absolute first action only.",
    "Pick up one item and deal with it.",
)


def generate_micro_steps(
    title: str,
    category: Optional[str] = None,
    template_id: Optional[str] = None,
    user_templates: Sequence[TaskTemplate] = (),
    *,
    builtin_templates: Sequence[TaskTemplate] = TEMPLATE_LIBRARY,
) -> List[MicroStep]:
    """Return a fresh, non-empty, ordered list of micro-steps for a task."""
    if template_id:
        template = _find_by_id(template_id, user_templates, builtin_templates)
        if template:
            return _steps_from_blueprints(template.micro_steps)

    match = find_best_template_match(title, category, user_templates, builtin_templates=builtin_templates)
    if match:
        return _steps_from_blueprints(match.micro_steps)

    return generate_generic_micro_steps(title)


def find_best_template_match(
    title: str,
    category: Optional[str] = None,
    user_templates: Sequence[TaskTemplate] = (),
    *,
    builtin_templates: Sequence[TaskTemplate] = TEMPLATE_LIBRARY,
) -> Optional[TaskTemplate]:
    """Pick the highest scoring template; ties keep the first one scanned."""
    normalized_title = title.strip().lower()
    best: Optional[TaskTemplate] = None
    best_score = 0

    for template in _candidates(user_templates, builtin_templates):
        score = score_template(normalized_title, category, template)
        if score > best_score:
            best_score = score
            best = template
    return best


def score_template(normalized_title: str, category: Optional[str], template: TaskTemplate) -> int:
    name = template.name.lower()
    score = 0
    if name in normalized_title or normalized_title in name:
        score += NAME_MATCH_SCORE
    if category and template.category == category:
        score += CATEGORY_MATCH_SCORE
    return score


def generate_generic_micro_steps(title: str) -> List[MicroStep]:
    return _steps_from_blueprints(
        [
            StepBlueprint(text=f'Gather what you need for "{title}".', suggested_minutes=1),
            StepBlueprint(text="Do the first tiny part, 2 minutes max.", suggested_minutes=2),
            StepBlueprint(text="Take a quick breather.", suggested_minutes=1),
            StepBlueprint(text="Do the next small piece.", suggested_minutes=2),
            StepBlueprint(text="Finish up or leave it ready for next time.", suggested_minutes=2),
        ]
    )


def make_step_smaller(step: MicroStep, rng: random.Random | None = None) -> MicroStep:
    """Swap a step for a one-minute starter; keeps its position in the list."""
    chooser = rng or random
    return step.model_copy(
        update={
            "id": str(uuid4()),
            "text": chooser.choice(SMALLER_STEP_TEXTS),
            "suggested_minutes": 1,
        }
    )


def _candidates(
    user_templates: Sequence[TaskTemplate],
    builtin_templates: Sequence[TaskTemplate],
) -> Iterable[TaskTemplate]:
    yield from user_templates
    yield from builtin_templates


def _find_by_id(
    template_id: str,
    user_templates: Sequence[TaskTemplate],
    builtin_templates: Sequence[TaskTemplate],
) -> Optional[TaskTemplate]:
    return next((template for template in _candidates(user_templates, builtin_templates) if template.id == template_id), None)


def _steps_from_blueprints(blueprints: Sequence[StepBlueprint]) -> List[MicroStep]:
    return [
        MicroStep(
            id=str(uuid4()),
            text=blueprint.text,
            order=index,
            suggested_minutes=blueprint.suggested_minutes,
        )
        for index, blueprint in enumerate(blueprints)
    ]
