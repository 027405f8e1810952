"""Authentication for both client surfaces.

Learn: Two entry points, one resolver:
1. API clients → Authorization: Bearer <jwt> → RequestAuthGate
2. Browsers → session cookie → server-side record holding the same jwt
   → SessionBridge

Both call IdentityResolver.resolve(), so a credential that's dead on one
path is dead on the other.
"""
