"""auth/ -- Authentication, sign-in policy, and admin allow-list for Heron.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or web/.
api/ and web/ import from auth/, not the other way around.
"""
