"""User lifecycle: registration, approval, disable, delete and login."""
