"""
Scheduling Domain

Appointment booking, slot conflict detection and the booking lifecycle.

Structure:
```
domain/scheduling/
├── __init__.py
├── schemas.py          # Appointment request/response schemas
├── time_calculator.py  # HH:MM parsing and start instants
├── repository.py       # Appointment queries and the per-date booking lock
├── conflicts.py        # Half-open slot overlap detection
├── state_machine.py    # Status transitions and who may trigger them
├── service.py          # Booking orchestration (create, cancel, admin edits)
├── stats_service.py    # Read-only dashboard aggregates
└── router.py           # /appointments endpoints
```

Status lifecycle:
    new bookings start as pending
    admins: any non-terminal → confirmed / in_progress / completed / cancelled
    owners: cancel before the start time
    completed, cancelled: terminal

Double-booking is prevented by taking a row lock on the target date's
booking_day_locks row before the conflict check and holding it until the
write commits.
"""
