"""
Shared Kernel

This module contains building blocks shared across all apps: domain events,
domain errors, the unit of work and the transient failure retry helper.
"""
