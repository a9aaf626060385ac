"""Repository for Counter operations (atomic increment-and-fetch)."""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from models.counter import Counter

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def increment(session: AsyncSession, *, name: str) -> int:
    """
    Increment the named counter and return its new value.

    A single INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement, so the
    database row lock serializes concurrent callers. A missing counter is
    created with sequence 1.

    Args:
        session: Database session
        name: Counter name (e.g. "bidId")

    Returns:
        The incremented sequence value
    """
    dialect = session.get_bind().dialect.name
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise NotImplementedError(f"Atomic counters are not supported on dialect {dialect!r}")

    stmt = insert(Counter).values(name=name, sequence=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Counter.name],
        set_={"sequence": Counter.sequence + 1},
    ).returning(Counter.sequence)

    result = await session.execute(stmt)
    return result.scalar_one()


async def get_value(session: AsyncSession, *, name: str) -> int | None:
    """Current value of a counter, or None if it was never used."""
    counter = await session.get(Counter, name)
    return counter.sequence if counter else None
