"""
Example 01: Basic Mapping

This example maps a dataclass onto a table, stores it and reads it back.
"""

from dataclasses import dataclass
from typing import Optional

from row_mapper import ConnectionConfig, DataLayer, Repository, entity


@dataclass
class User:
    """User entity"""
    id: Optional[int] = None
    name: str = ""
    email: Optional[str] = None


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")

    with DataLayer(config) as db:
        db.execute("""
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT
            )
        """)

        # Bind the mapping against the live table
        users = entity(User, "users").columns("id", "name", "email").build(db)
        repo = Repository(users)

        print("=== Basic Mapping ===\n")

        alice = User(name="Alice", email="alice@example.com")
        repo.store(alice)
        print(f"Stored: {alice} (primary key {repo.primary_key(alice)})")

        alice.email = "alice@example.org"
        repo.store(alice)
        print(f"Updated: {repo.by_id(alice.id)}")

        # persist() reports failures instead of raising
        nameless = User(name=None)
        print(f"Persist without a name succeeded: {repo.persist(nameless)}\n")

        for user in repo.all():
            print(f"  - {user.name} ({user.email})")


if __name__ == "__main__":
    main()
