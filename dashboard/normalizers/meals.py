from __future__ import annotations

from typing import Any, Mapping

from dashboard.records import MealInfo, MealResident, MealSet
from dashboard.services.payload import dig, flag, ident, latest_entry, number, text, to_datetime

MEALS = ('breakfast', 'lunch', 'dinner')


def normalize_meal(meal: Any, staff: str | None = None) -> MealInfo:
    """One meal slot of the latest day; an absent slot is pending and editable."""
    if not isinstance(meal, Mapping):
        meal = {}
    return MealInfo(
        marked=flag(meal.get('taken'), False),
        time=text(meal.get('time')),
        staff=staff,
        reason_if_not_taken=text(meal.get('reasonIfNotTaken')),
        notes=text(meal.get('notes')),
        marked_at=text(meal.get('markedAt')),
        is_editable=flag(meal.get('isEditable'), True),
    )


def normalize_meal_marking(item: Any) -> MealResident:
    """Meal marking document -> one row of the meal tracking table.

    Only the latest day in ``details`` is shown; with no details every
    meal is pending.
    """
    latest = latest_entry(dig(item, 'details'))
    meals = dig(latest, 'meals', default={})
    staff = text(dig(item, 'staffId', 'fullName'))
    port_number = text(dig(item, 'guestId', 'userId', 'portNumber'))
    marking_id = text(dig(item, '_id'))
    return MealResident(
        id=marking_id or port_number or '',
        created_at=to_datetime(dig(item, 'createdAt')),
        name=text(dig(item, 'guestId', 'userId', 'fullName'), ''),
        port_number=port_number,
        room=text(dig(item, 'guestId', 'familyId')),
        branch=text(dig(item, 'branchId', 'name')),
        branch_id=ident(dig(item, 'branchId')),
        meals=MealSet(*(normalize_meal(dig(meals, name), staff) for name in MEALS)),
        total_meals_taken=number(dig(latest, 'totalMealsTaken'), 0),
        meal_date=text(dig(latest, 'date')),
        marking_id=marking_id,
    )
