"""
auth — Credential handling.

Provides:
  • bcrypt password hashing, off the event loop
  • ``CredentialService`` for register / authenticate
  • Input policy for usernames and passwords
"""
