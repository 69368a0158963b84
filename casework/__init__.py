"""
Casework staff API with office/department scoped access control.

Every protected request passes through ``casework.security.dependencies.enforce_security``
before a route handler runs. See ``casework.security`` for the engine itself.
"""
