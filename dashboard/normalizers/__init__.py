"""Normalizers: one raw care backend item in, one display record out.

Normalizers never raise on missing or malformed fields; every value
falls back to its record default.
"""
from .baskets import normalize_basket
from .incidents import normalize_incident
from .meals import normalize_meal_marking
from .removals import normalize_removal
from .rooms import normalize_branch, normalize_capacity_room, normalize_company, normalize_location
from .service_users import normalize_service_user
from .welfare import normalize_welfare_check

__all__ = [
    'normalize_basket',
    'normalize_branch',
    'normalize_capacity_room',
    'normalize_company',
    'normalize_incident',
    'normalize_location',
    'normalize_meal_marking',
    'normalize_removal',
    'normalize_service_user',
    'normalize_welfare_check',
]
