"""Account services: identity tokens, user profiles and friendships.

These stand in for the external identity provider and profile store; the
rest of the code only relies on ``verify_token``, ``get_user`` and
``upsert_user``.
"""
