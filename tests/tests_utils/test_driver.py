"""
=========================================================
Integration suite for utils/driver.py on in-memory SQLite
=========================================================

Runs real statement builders through ``SQLAlchemyDriver`` against an
in-memory SQLite database. SQLite has no ``SHOW TABLES``/``TRUNCATE``, so
those operations are covered by the mock-driver tests instead.

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_driver.py -v
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from sql.exceptions import UsageStateError
from sql.statement_builder import StatementBuilder
from sql.values import BindKind
from utils.driver import SQLAlchemyDriver, SQLAlchemyPreparedStatement


@pytest.fixture
def connection():
    """Provide a connection to an in-memory database holding an empty users table."""
    engine = create_engine('sqlite://')
    with engine.connect() as conn:
        conn.execute(text(
            "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "name VARCHAR(255), gender BOOLEAN, age INTEGER)"
        ))
        yield conn
    engine.dispose()


@pytest.fixture
def driver(connection, users_columns, users_data):
    """Provide a driver on a users table loaded with the sample batch."""
    sqlite_driver = SQLAlchemyDriver(connection)
    StatementBuilder.insert('users', users_columns, users_data).execute(sqlite_driver)
    return sqlite_driver


def names(cursor):
    return [row['name'] for row in cursor]


@pytest.mark.integration
def test_insert_returns_generated_ids(connection, users_columns, users_data):
    ids = StatementBuilder.insert('users', users_columns, users_data).execute(SQLAlchemyDriver(connection))

    assert ids == list(range(1, 21))


@pytest.mark.integration
def test_select_with_comparator_and_order(driver):
    cursor = (
        StatementBuilder.select('users', 'name')
        .add_condition('age', '>', 30)
        .order_by('age', 'DESC')
        .execute(driver)
    )

    result = names(cursor)
    assert len(result) == 10
    assert result[:3] == ['isac', 'michael', 'kevin']


@pytest.mark.integration
def test_select_boolean_binding(driver):
    rows = StatementBuilder.select('users', 'id').add_condition('gender', '=', True).execute(driver).fetch_all()

    assert len(rows) == 10


@pytest.mark.integration
def test_select_like_and_limit(driver):
    contains = StatementBuilder.select('users', 'name').begin_condition('name').contains('j')
    limited = StatementBuilder.select('users', 'name').order_by('id', 'ASC').limit(3)

    assert sorted(names(contains.execute(driver))) == ['jason', 'jessica', 'john']
    assert names(limited.execute(driver)) == ['john', 'marie', 'isac']


@pytest.mark.integration
def test_select_in_subquery(driver):
    sub = StatementBuilder.select('users', 'id').begin_condition('age').between(30, 35)
    select = StatementBuilder.select('users', 'name').begin_condition('id').in_(sub)

    assert sorted(names(select.execute(driver))) == ['alex', 'brian', 'jessica', 'john', 'olivia', 'peter']


@pytest.mark.integration
def test_select_union(driver):
    sub = StatementBuilder.select('users', 'name').add_condition('age', '<', 23)
    select = (
        StatementBuilder.select('users', 'name')
        .add_condition('age', '>', 40)
        .union(sub)
        .order_by('name', 'ASC')
    )

    assert names(select.execute(driver)) == ['isac', 'lisa']


@pytest.mark.integration
def test_update_then_select(driver):
    StatementBuilder.update('users', ['age'], [99]).add_condition('name', '=', 'john').execute(driver)

    row = StatementBuilder.select('users', 'age').add_condition('name', '=', 'john').execute(driver).first()
    assert row == {'age': 99}


@pytest.mark.integration
def test_delete_range(driver):
    assert StatementBuilder.delete('users').begin_condition('age').between(40, 50).execute(driver) is True

    remaining = StatementBuilder.select('users', 'name').execute(driver).fetch_all()
    assert len(remaining) == 18


@pytest.mark.integration
def test_drop_table(driver, connection):
    StatementBuilder.drop('users').execute(driver)

    tables = connection.execute(text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'users'"))
    assert tables.fetchone() is None


@pytest.mark.integration
def test_select_dataframe(driver):
    frame = (
        StatementBuilder.select('users', 'name', 'age')
        .add_condition('age', '>=', 40)
        .order_by('age', 'DESC')
        .execute(driver)
        .to_dataframe()
    )

    assert frame.shape == (2, 2)
    assert frame['name'].tolist() == ['isac', 'michael']


@pytest.mark.edge_case
def test_driver_errors_propagate(connection):
    with pytest.raises(OperationalError):
        StatementBuilder.select('missing_table', '*').execute(SQLAlchemyDriver(connection))


@pytest.mark.edge_case
def test_prepared_statement_requires_execution(connection):
    prepared = SQLAlchemyPreparedStatement(connection, 'SELECT 1')

    with pytest.raises(UsageStateError):
        prepared.fetch_row()
    prepared.close()


@pytest.mark.edge_case
def test_prepared_statement_rebinds_between_executions(connection):
    prepared = SQLAlchemyDriver(connection).prepare('INSERT INTO users (name) VALUES (:name)')

    for name in ('ana', 'bob'):
        prepared.bind('name', name, BindKind.STRING)
        prepared.execute()

    rows = connection.execute(text("SELECT name FROM users ORDER BY id")).fetchall()
    assert [row[0] for row in rows] == ['ana', 'bob']
    assert prepared.statement == 'INSERT INTO users (name) VALUES (:name)'
