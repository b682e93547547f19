"""Test cases for database utilities."""

import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from courseware.database import (
    get_db, get_db_session, create_tables, drop_tables,
    check_database_connection, engine, Base, _engine_options,
)


class TestDatabaseUtilities:
    """Test cases for database utility functions."""

    def test_get_db_dependency(self):
        """Test get_db dependency function."""
        db_generator = get_db()
        db_session = next(db_generator)

        assert db_session is not None

        # Clean up
        with pytest.raises(StopIteration):
            next(db_generator)

    def test_get_db_session_context_manager(self):
        """Test get_db_session context manager."""
        with get_db_session() as db:
            assert db is not None
            assert db.is_active

    def test_get_db_session_rolls_back_on_database_error(self):
        """Test that get_db_session rolls back and re-raises."""
        with patch("courseware.database.SessionLocal") as mock_factory:
            mock_db = MagicMock()
            mock_factory.return_value = mock_db
            with pytest.raises(SQLAlchemyError):
                with get_db_session():
                    raise SQLAlchemyError("boom")

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()
        mock_db.close.assert_called_once()

    @patch('courseware.database.Base.metadata.create_all')
    def test_create_tables_success(self, mock_create_all):
        """Test successful table creation."""
        mock_create_all.return_value = None

        create_tables()

        mock_create_all.assert_called_once_with(bind=engine)

    @patch('courseware.database.Base.metadata.create_all')
    def test_create_tables_error(self, mock_create_all):
        """Test table creation error handling."""
        mock_create_all.side_effect = SQLAlchemyError("Connection failed")

        with pytest.raises(SQLAlchemyError):
            create_tables()

    @patch('courseware.database.Base.metadata.drop_all')
    def test_drop_tables_success(self, mock_drop_all):
        """Test successful table dropping."""
        mock_drop_all.return_value = None

        drop_tables()

        mock_drop_all.assert_called_once_with(bind=engine)

    @patch('courseware.database.Base.metadata.drop_all')
    def test_drop_tables_error(self, mock_drop_all):
        """Test table dropping error handling."""
        mock_drop_all.side_effect = SQLAlchemyError("Connection failed")

        with pytest.raises(SQLAlchemyError):
            drop_tables()

    def test_check_database_connection_success(self):
        """Test successful database connection check."""
        assert check_database_connection() is True

    @patch('courseware.database.engine.connect')
    def test_check_database_connection_failure(self, mock_connect):
        """Test database connection check failure."""
        mock_connect.side_effect = SQLAlchemyError("Connection failed")

        assert check_database_connection() is False


class TestDatabaseConfiguration:
    """Test cases for database configuration."""

    def test_postgres_pool_options(self):
        options = _engine_options("postgresql://u:p@localhost/db")
        assert options["pool_size"] == 10
        assert options["max_overflow"] == 20
        assert options["pool_recycle"] == 3600
        assert options["pool_pre_ping"] is True

    def test_sqlite_options(self):
        options = _engine_options("sqlite:///:memory:")
        assert "pool_size" not in options
        assert options["connect_args"] == {"check_same_thread": False}

    @patch.dict("os.environ", {"SQL_DEBUG": "TRUE"})
    def test_sql_debug_flag(self):
        assert _engine_options("sqlite://")["echo"] is True

    def test_sqlite_foreign_keys_enabled(self, db_session):
        assert db_session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_base_metadata(self):
        """Test that every table is registered."""
        assert {
            "users", "courses", "exercises", "submissions", "reviews",
            "available_points", "awarded_points", "feedback_questions", "feedback_answers",
        } <= set(Base.metadata.tables)
