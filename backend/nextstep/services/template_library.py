"""Built-in template library and quick-add presets.

Seed data only: these templates are never written to storage and cannot be
deleted. User-saved templates live in the `templates` blob.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from nextstep.api.schemas.template import QuickAddPreset, StepBlueprint, TaskTemplate

_StepSeed = Tuple[str, int]


def _builtin(template_id: str, name: str, category: str, steps: Sequence[_StepSeed]) -> TaskTemplate:
    return TaskTemplate(
        id=template_id,
        name=name,
        category=category,
        micro_steps=[StepBlueprint(text=text, suggested_minutes=minutes) for text, minutes in steps],
        is_built_in=True,
    )


TEMPLATE_LIBRARY: List[TaskTemplate] = [
    # Home
    _builtin(
        "dishes",
        "dishes",
        "home",
        [
            ("Clear a small patch of counter.", 1),
            ("Fill the sink or basin with hot soapy water.", 2),
            ("Wash 5 items.", 3),
            ("Take a 2-minute break.", 2),
            ("Wash 5 more items.", 3),
            ("Wipe the counters.", 2),
        ],
    ),
    _builtin(
        "laundry",
        "laundry",
        "home",
        [
            ("Gather dirty clothes into one pile.", 2),
            ("Put one load in the machine.", 2),
            ("Start the wash.", 1),
            ("When done, move to dryer or hang.", 3),
            ("Fold or hang 5 items.", 3),
            ("Put away what you can.", 2),
        ],
    ),
    _builtin(
        "vacuuming",
        "vacuuming",
        "home",
        [
            ("Get the vacuum out and plug it in.", 1),
            ("Vacuum one room or one clear path.", 5),
            ("Take a short break.", 2),
            ("Do another room or path if you have energy.", 5),
            ("Put the vacuum away.", 1),
        ],
    ),
    _builtin(
        "trash",
        "trash",
        "home",
        [
            ("Gather trash from one room.", 2),
            ("Tie the bag and take it out.", 2),
            ("Put a fresh bag in.", 1),
        ],
    ),
    _builtin(
        "bathroom reset",
        "bathroom reset",
        "home",
        [
            ("Quick wipe of the sink and mirror.", 2),
            ("Spray toilet and wipe.", 2),
            ("Replace hand towel if needed.", 1),
            ("Quick floor sweep if needed.", 2),
        ],
    ),
    _builtin(
        "declutter",
        "declutter one area",
        "home",
        [
            ("Pick one surface (desk, shelf, corner).", 1),
            ("Remove 5 items that don't belong.", 2),
            ("Put them away or in a donate box.", 2),
            ("Take a breather.", 1),
        ],
    ),
    _builtin(
        "water plants",
        "water plants",
        "home",
        [
            ("Get a jug or watering can.", 1),
            ("Water 3 plants.", 3),
            ("Done, or do more if you like.", 1),
        ],
    ),
    _builtin(
        "fridge check",
        "fridge check",
        "home",
        [
            ("Scan for anything obviously expired.", 2),
            ("Toss one item that's past it.", 1),
            ("Wipe one shelf if you have time.", 2),
        ],
    ),
    # Admin
    _builtin(
        "pay bills",
        "pay bills",
        "admin",
        [
            ("Open your bank or bill app.", 1),
            ("Pay one bill.", 3),
            ("Take a breather.", 1),
            ("Pay another if needed.", 3),
        ],
    ),
    _builtin(
        "sort mail",
        "sort mail",
        "admin",
        [
            ("Put mail in one pile.", 1),
            ("Toss obvious junk.", 2),
            ("Open one important-looking envelope.", 2),
            ("Action or file it.", 2),
        ],
    ),
    _builtin(
        "inbox triage",
        "inbox triage",
        "admin",
        [
            ("Archive or delete 5 emails.", 2),
            ("Reply to one easy email.", 3),
            ("Flag 2 that need action later.", 1),
        ],
    ),
    _builtin(
        "expense logging",
        "expense logging",
        "admin",
        [
            ("Open your expense app or sheet.", 1),
            ("Log 3 recent receipts.", 3),
            ("Done or schedule next batch.", 1),
        ],
    ),
    # Self-care
    _builtin(
        "shower",
        "shower",
        "self-care",
        [
            ("Get a fresh towel and put it in reach.", 1),
            ("Get in the shower.", 1),
            ("Do the basics: soap, shampoo, rinse.", 5),
            ("Dry off and get dressed.", 3),
        ],
    ),
    _builtin(
        "meds",
        "meds",
        "self-care",
        [
            ("Get your meds and a glass of water.", 1),
            ("Take them.", 1),
            ("Refill pill organizer if needed.", 2),
        ],
    ),
    _builtin(
        "stretch",
        "stretch",
        "self-care",
        [
            ("Stand up and reach overhead.", 1),
            ("Touch your toes or calves, no pressure.", 2),
            ("Roll your shoulders 5 times each way.", 1),
            ("Take 3 deep breaths.", 1),
        ],
    ),
    _builtin(
        "quick walk",
        "quick walk",
        "self-care",
        [
            ("Put on shoes.", 1),
            ("Walk to the end of the block.", 3),
            ("Turn around and come back.", 3),
        ],
    ),
    _builtin(
        "tidy bedroom",
        "tidy bedroom",
        "self-care",
        [
            ("Pick clothes off the floor into one pile.", 2),
            ("Make the bed, even loosely.", 2),
            ("Clear nightstand.", 2),
        ],
    ),
    # Planning
    _builtin(
        "weekly review",
        "weekly review",
        "planning",
        [
            ("Open your calendar for the week.", 1),
            ("Add one thing you've been avoiding.", 2),
            ("Block one break or buffer.", 2),
            ("Close it. You did the basics.", 1),
        ],
    ),
    _builtin(
        "meal planning",
        "meal planning",
        "planning",
        [
            ("List 3 meals you could make.", 3),
            ("Check what you already have.", 2),
            ("Add 3 items to a shopping list.", 2),
        ],
    ),
    _builtin(
        "calendar check",
        "calendar check",
        "planning",
        [
            ("Open your calendar.", 1),
            ("Review next 3 days.", 2),
            ("Reschedule or add one item if needed.", 2),
        ],
    ),
]

QUICK_ADD_PRESETS: List[QuickAddPreset] = [
    QuickAddPreset(label="Dishes", template_id="dishes"),
    QuickAddPreset(label="Laundry", template_id="laundry"),
    QuickAddPreset(label="Trash", template_id="trash"),
    QuickAddPreset(label="Meds", template_id="meds"),
    QuickAddPreset(label="Inbox", template_id="inbox triage"),
    QuickAddPreset(label="Water plants", template_id="water plants"),
]
