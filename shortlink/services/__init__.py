"""
Business logic for short links and accounts.

- short_code: salted code generation
- cache: cache-aside policy over the optional Redis client
- url_service: shorten, resolve, list and delete mappings
- auth_service: registration, credential checks and session tokens
"""
