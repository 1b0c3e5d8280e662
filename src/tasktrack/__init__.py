"""TaskTrack — per-user task management API.

A FastAPI service with JWT bearer authentication, bcrypt-hashed
credentials, and identity-scoped CRUD + statistics over tasks.
"""

__version__ = "1.0.0"
