"""Account and task stores — the only code that builds queries.

Learn: Services and the identity resolver talk to these small
repository classes instead of issuing SQL themselves. Every task
lookup is scoped by owner, so a foreign task id simply isn't found.
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.db.models import Task, User


class AccountStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists_by_username(self, username: str) -> bool:
        result = await self.db.execute(
            select(exists().where(User.username == username))
        )
        return bool(result.scalar())

    async def exists_by_email(self, email: str) -> bool:
        result = await self.db.execute(
            select(exists().where(User.email == email))
        )
        return bool(result.scalar())

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def save(self, user: User) -> User:
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


class TaskStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all_by_owner(self, user_id: uuid.UUID) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.user_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return list(result.scalars().all())

    async def find_by_id_and_owner(
        self, task_id: int, user_id: uuid.UUID
    ) -> Optional[Task]:
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.user_id == user_id)
        )
        return result.scalars().first()

    async def save(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def save_all(self, tasks: Sequence[Task]) -> None:
        self.db.add_all(tasks)
        await self.db.commit()

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.commit()
