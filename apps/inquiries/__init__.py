"""Inquiries app package.

This app encapsulates the buyer inquiry lifecycle: the status state machine,
commission locking, the reservation coordinator that commits a property to
one winning inquiry, and the periodic sweep that reclaims lapsed deposit
reservations. Cross-entity writes run inside one unit of work with row
locks so concurrent workers cannot both win the same property.
"""
