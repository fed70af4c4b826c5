"""
========================================================
Pytest suite for utils/database_utils.py
========================================================

Test Coverage:
--------------
- get_connection_string: Explicit URL vs config fallback
- create_sqlalchemy_engine: Engine creation and invalid URLs
- check_database_available: Availability check on SQLite and failing engines
- open_driver: Driver context manager committing on exit

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_database_utils.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from sql.statement_builder import StatementBuilder
from utils.database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    get_connection_string,
    open_driver,
)
from utils.driver import SQLAlchemyDriver


class FakeConfig:
    """Mock config object for testing."""
    def get_connection_string(self):
        return 'mysql+pymysql://root:secret@db:3306/rdb'


@pytest.fixture
def mock_config():
    """Provide mock configuration."""
    with patch('utils.database_utils.config', FakeConfig()):
        yield


@pytest.mark.unit
def test_get_connection_string_defaults_to_config(mock_config):
    assert get_connection_string() == 'mysql+pymysql://root:secret@db:3306/rdb'


@pytest.mark.unit
def test_get_connection_string_explicit_url(mock_config):
    assert get_connection_string('sqlite://') == 'sqlite://'


@pytest.mark.unit
def test_create_engine_and_check_availability():
    engine = create_sqlalchemy_engine('sqlite://')

    assert check_database_available(engine) is True
    engine.dispose()


@pytest.mark.edge_case
def test_create_engine_with_unknown_dialect():
    with pytest.raises(DatabaseConnectionError):
        create_sqlalchemy_engine('notadialect://localhost/db')


@pytest.mark.edge_case
def test_check_database_unavailable():
    engine = MagicMock()
    engine.connect.side_effect = OperationalError('SELECT 1', {}, Exception('refused'))

    assert check_database_available(engine) is False


@pytest.mark.integration
def test_open_driver_commits_on_exit(tmp_path):
    engine = create_sqlalchemy_engine(f"sqlite:///{tmp_path / 'rdb.sqlite'}")

    with open_driver(engine) as driver:
        assert isinstance(driver, SQLAlchemyDriver)
        driver.connection.exec_driver_sql('CREATE TABLE tags (id INTEGER PRIMARY KEY, label VARCHAR(50))')
        StatementBuilder.insert('tags', ['label'], [['red', 'blue']]).execute(driver)

    with open_driver(engine) as driver:
        rows = StatementBuilder.select('tags', 'label').order_by('id', 'ASC').execute(driver).fetch_all()

    assert rows == [{'label': 'red'}, {'label': 'blue'}]
    engine.dispose()
