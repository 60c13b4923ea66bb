"""directory/ -- The user directory: domain model, input validation, and store.

Layer rule: directory/ imports from core/ only.
It does NOT import from api/, web/, or auth/.
"""
