"""
============================================================
TARJETA CRC
============================================================
Class: spaced_api.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (testing / local dev)
============================================================
"""

# ---------------------------
# In-memory implementations
# No persisten datos tras reiniciar la app.
# ---------------------------
from .in_memory import InMemoryUserRepository, InMemoryVolunteerRepository

# ---------------------------
# Postgres implementations
# ---------------------------
from .postgres import PostgresUserRepository, PostgresVolunteerRepository

__all__ = [
    # Postgres
    "PostgresUserRepository",
    "PostgresVolunteerRepository",
    # In-memory
    "InMemoryUserRepository",
    "InMemoryVolunteerRepository",
]
