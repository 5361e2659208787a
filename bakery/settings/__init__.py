"""
Dynamic settings loader for the bakery project.
Selects environment settings based on the ``env`` variable.
"""
import os

BAKERY_ENV = os.getenv("env", "local").lower()

if BAKERY_ENV in ("prod", "production"):
    from .prod import *
elif BAKERY_ENV in ("local", "dev", "development", "test"):
    from .local import *
else:
    raise RuntimeError(f"Unknown env: {BAKERY_ENV}. Use 'local' or 'prod'.")
