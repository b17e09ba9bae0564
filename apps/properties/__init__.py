"""Properties app package.

Owns the listing model and the reservation mutation primitives shared by
the reservation coordinator and the expiry sweeper.
"""
