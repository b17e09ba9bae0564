"""Calendar events app package.

Agents' scheduled commitments (viewings, meetings, deadlines). Bookings are
checked against the agent's other scheduled events with a 30 minute buffer,
under a lock on the agent row so two overlapping bookings cannot both pass.
"""
