"""
Shelter-scoped authorization.

Resolves which shelter a request targets and the caller's role in it
(admin, member or none), and gates handlers on that role.
"""
