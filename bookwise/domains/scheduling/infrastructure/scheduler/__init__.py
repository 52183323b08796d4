"""
Scheduling Sweeps
"""

from bookwise.domains.scheduling.infrastructure.scheduler.sweep_scheduler import SweepScheduler

__all__ = ["SweepScheduler"]
