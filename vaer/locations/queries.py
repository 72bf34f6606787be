from collections.abc import Mapping

from .. import db


async def get_setting(*, name: str) -> str | None:
    return await db.fetchval("SELECT value FROM widget_setting WHERE name = $1", name)


async def save_settings(*, values: Mapping[str, str]) -> None:
    """
    Insert or update the given settings in a single transaction.
    """

    async with db.transaction():
        await db.executemany(
            """
            INSERT INTO widget_setting (name, value, updated_at)
            VALUES ($1, $2, now())
            ON CONFLICT (name) DO UPDATE
            SET value = excluded.value, updated_at = excluded.updated_at
            """,
            list(values.items()),
        )
