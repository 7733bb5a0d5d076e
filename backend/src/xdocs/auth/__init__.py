"""Authentication: password digests, session tokens and request principals."""
