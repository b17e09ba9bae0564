"""Notifications app package.

Delivers domain events to interested staff. The sink is installed once at
process start (see ``apps.NotificationsConfig``), torn down on shutdown, and
can be overridden per call by every service.
"""
