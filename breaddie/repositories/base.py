"""Common helpers for repository implementations."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")

_FUNCTION_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


class BaseRepository(Generic[ModelT]):
    """Lightweight helper storing the AsyncSession dependency."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, instance: ModelT) -> ModelT:
        """Add model to session handling async mocks in tests."""
        add_result = cast(object, self.session.add(instance))
        if isinstance(add_result, Awaitable):
            await add_result
        await self.session.flush()
        return instance

    async def add_all(self, instances: list[ModelT]) -> list[ModelT]:
        if not instances:
            return instances
        add_result = cast(object, self.session.add_all(instances))
        if isinstance(add_result, Awaitable):
            await add_result
        await self.session.flush()
        return instances

    async def call_function(
        self,
        name: str,
        params: Mapping[str, Any],
        *,
        bind_types: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Invoke a set-returning database function by name with named arguments.

        The computation stays in the database; rows come back as plain dicts.
        """
        if not _FUNCTION_NAME.match(name):
            raise ValueError(f"Invalid database function name: {name!r}")

        arguments = ", ".join(f"{key} => :{key}" for key in params)
        stmt = text(f"SELECT * FROM {name}({arguments})")  # noqa: S608
        if bind_types:
            stmt = stmt.bindparams(
                *(bindparam(key, type_=type_) for key, type_ in bind_types.items())
            )
        result = await self.session.execute(stmt, dict(params))
        return [dict(row) for row in result.mappings()]


__all__ = ["BaseRepository"]
