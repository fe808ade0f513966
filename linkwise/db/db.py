import asyncpg
from linkwise.config import settings
from typing import Optional

pool: Optional[asyncpg.Pool] = None


async def init_pool() -> asyncpg.Pool:
    global pool
    if pool is None:
        pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.database_pool_min,
            max_size=settings.database_pool_max,
            ssl=settings.database_ssl,
        )
    return pool


async def close_pool():
    global pool
    if pool:
        await pool.close()
        pool = None


class Database:
    def __init__(self, pool: Optional[asyncpg.Pool] = None):
        self.pool = pool

    async def get_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            self.pool = await init_pool()
        return self.pool

    async def execute(self, query, *args):
        pool = await self.get_pool()
        return await pool.execute(query, *args)

    async def executemany(self, query, args):
        """Run query once per argument tuple inside a single transaction"""
        pool = await self.get_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(query, args)
