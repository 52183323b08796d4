"""
Core building blocks shared by every domain: base entities, exceptions,
logging and the application wiring.
"""
