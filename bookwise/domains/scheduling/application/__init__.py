"""
Scheduling Application Layer

Application services orchestrating the domain through ports.
"""
