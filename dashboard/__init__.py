"""Dashboard application for the care facility administration UI.

This package fetches collections from the care backend, reshapes them
into flat display records for the dashboard tables, and forwards staff
actions (approvals, rejections, incident resolution, relocation,
signatures) back to the care backend.
"""
