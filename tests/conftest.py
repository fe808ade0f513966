import pytest
import pytest_asyncio
import asyncpg
from typing import AsyncGenerator
from testcontainers.postgres import PostgresContainer
from linkwise.db.db import Database
from linkwise.services.leads.repo import LeadStore

TEST_TABLE = "leads"


@pytest.fixture(scope="session")
def postgres_container():
    """Start a PostgreSQL container for integration tests."""
    postgres = PostgresContainer(
        image="postgres:16-alpine",
        username="testuser",
        password="testpass",
        dbname="testdb",
        driver="asyncpg",
    )
    postgres.start()

    yield postgres

    postgres.stop()


@pytest_asyncio.fixture(scope="function")
async def test_db_pool(postgres_container) -> AsyncGenerator[asyncpg.Pool, None]:
    """Create a test database pool for each test."""
    pool = await asyncpg.create_pool(
        host=postgres_container.get_container_host_ip(),
        port=postgres_container.get_exposed_port(5432),
        database=postgres_container.dbname,
        user=postgres_container.username,
        password=postgres_container.password,
        min_size=1,
        max_size=5,
    )

    async with pool.acquire() as conn:
        await conn.execute(f'DROP TABLE IF EXISTS "{TEST_TABLE}" CASCADE')

    yield pool

    await pool.close()


@pytest_asyncio.fixture
async def test_db(test_db_pool) -> Database:
    """Create a test database instance."""
    return Database(pool=test_db_pool)


@pytest_asyncio.fixture
async def lead_store(test_db) -> LeadStore:
    """Lead store over a freshly created table."""
    store = LeadStore(test_db, table=TEST_TABLE)
    await store.ensure_table()
    return store
