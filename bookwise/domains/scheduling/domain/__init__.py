"""
Scheduling Domain Layer

Core business logic for the scheduling bounded context.

Components:
- Entities: Booking (aggregate root), WaitlistEntry, Reminder, SelfServeToken, catalog entities
- Value Objects: statuses, TimeRange, QuietHours, tenant settings, typed audit log entries
- Domain Services: SlotGenerator, BookingPolicy, reminder planning
"""
