"""
Example 03: Criteria and Transactions

This example filters with nested criteria and groups writes atomically.
"""

from dataclasses import dataclass
from typing import Optional

from row_mapper import NOT_NULL, ConnectionConfig, Criteria, DataLayer, Repository, entity


@dataclass
class Task:
    id: Optional[int] = None
    title: str = ""
    owner: Optional[str] = None
    priority: int = 0


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")

    with DataLayer(config) as db:
        db.execute("""
            CREATE TABLE tasks (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                owner TEXT,
                priority INTEGER NOT NULL
            )
        """)
        tasks = entity(Task, "tasks").columns("id", "title", "owner", "priority").build(db)
        repo = Repository(tasks)

        print("=== Criteria and Transactions ===\n")

        # The inserts commit together
        with db.transaction():
            repo.store(Task(title="Write docs", owner="alice", priority=2))
            repo.store(Task(title="Fix build", priority=1))
            repo.store(Task(title="Release", owner="bob", priority=1))

        # A failing block rolls every insert back
        try:
            with db.transaction():
                repo.store(Task(title="Never saved", priority=3))
                raise RuntimeError("abort")
        except RuntimeError:
            print(f"After rollback: {len(repo.all())} tasks\n")

        print("Unassigned or priority 2:")
        for task in repo.selection({"@or": {"owner": None, "priority": 2}}):
            print(f"  - {task.title}")

        print("\nFirst assigned task:")
        first = repo.selection(Criteria().add("owner", NOT_NULL).add("@limit", 1))
        for task in first:
            print(f"  - {task.title} ({task.owner})")


if __name__ == "__main__":
    main()
