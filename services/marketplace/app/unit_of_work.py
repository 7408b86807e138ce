"""Explicit unit of work: an ordered write set committed atomically.

Procedures build the full list of mutations first (inserts via ``add``,
DML statements via ``execute``) and only then call ``commit``. Nothing is
written while the list is being built, so a failure while deciding what to
write leaves the store untouched; a failure while applying rolls every
mutation back together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

logger = logging.getLogger(__name__)


@dataclass
class UnitOfWork:
    db: AsyncSession
    _operations: list[object | Executable] = field(default_factory=list)

    def add(self, instance: object) -> None:
        self._operations.append(instance)

    def execute(self, statement: Executable) -> None:
        self._operations.append(statement)

    def __len__(self) -> int:
        return len(self._operations)

    async def commit(self) -> None:
        try:
            for op in self._operations:
                if isinstance(op, Executable):
                    # statements must observe every insert queued before them
                    await self.db.flush()
                    await self.db.execute(op)
                else:
                    self.db.add(op)
            await self.db.flush()
            await self.db.commit()
        except Exception:
            logger.debug("Rolling back unit of work (%d operations)", len(self._operations))
            await self.db.rollback()
            raise
        finally:
            self._operations.clear()
