"""auth/ -- Session issuing and token verification for UserDirectory.

Layer rule: auth/ imports from core/ and directory/ only.
It does NOT import from api/ or web/.
api/ and web/ import from auth/, not the other way around.
"""
