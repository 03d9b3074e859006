"""auth/ -- Password hashing, session tokens and the request auth dependency.

Layer rule: auth/ imports only core/, users/store.py, stdlib and third-party
libraries. It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
