"""
Scheduling Domain

Availability, booking lifecycle, waitlist backfill and self-serve links for
appointment-based businesses.
"""
