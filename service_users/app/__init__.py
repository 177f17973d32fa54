"""
Users Service package for the User Registry.

This package registers users and lists them. It provides:

- app.main: API surface for registration, listing and health.
- app.service: Registration rules (minimum age) in front of the repository.
- app.repository: Repository contract and the cache-aside proxy.
- app.persistence: PostgreSQL storage for user records.
- app.cache: Redis-backed cache for the serialized user list.

Guidelines:
- The service is stateless; rely on external cache/DB.
- The store is the source of truth; cache failures never fail a request.
"""
