"""Users app package.

Holds the staff account model (administrators and agents). Accounts are the
actors recorded on inquiry history and the owners of calendar events.
"""
