"""Staff Scheduling package.

Feature modules (staff_calendar, conflicts, requests, approvals, shifts,
templates) with pure domain functions and thin service/repository layers
around them for the gym-chain staff calendar.
"""
