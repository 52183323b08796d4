"""
Scheduling Infrastructure Layer

SQLAlchemy persistence, external adapters and periodic sweeps.
"""
