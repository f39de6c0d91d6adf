"""
Tests for core PostgreSQL connection management.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.core.database import PostgresConnection


def connect(**overrides):
    params = {
        "host": "localhost",
        "port": 5432,
        "database": "utilization_db",
        "user": "analytics",
        "password": "secret",
    }
    params.update(overrides)
    return PostgresConnection(**params)


class TestPostgresConnection:
    """Tests for PostgresConnection base class."""

    @patch("src.core.database.psycopg2.connect")
    def test_initialization(self, mock_connect):
        """Test connection parameters and the default timeout."""
        mock_connection = MagicMock()
        mock_connect.return_value = mock_connection

        conn = connect()

        mock_connect.assert_called_once_with(
            host="localhost",
            port=5432,
            database="utilization_db",
            user="analytics",
            password="secret",
            connect_timeout=10,
        )
        assert conn.connection == mock_connection

    @patch("src.core.database.psycopg2.connect")
    def test_custom_connect_timeout(self, mock_connect):
        connect(connect_timeout=3)

        assert mock_connect.call_args.kwargs["connect_timeout"] == 3

    @patch("src.core.database.psycopg2.connect")
    def test_initialization_failure(self, mock_connect):
        """Test connection failure is re-raised."""
        mock_connect.side_effect = Exception("Connection refused")

        with pytest.raises(Exception, match="Connection refused"):
            connect()

    @patch("src.core.database.psycopg2.connect")
    def test_get_cursor_commits_and_closes(self, mock_connect):
        mock_connection = MagicMock()
        mock_cursor = MagicMock()
        mock_connection.cursor.return_value = mock_cursor
        mock_connect.return_value = mock_connection

        conn = connect()
        with conn.get_cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.execute("SELECT 2")

        assert mock_cursor.execute.call_count == 2
        mock_connection.commit.assert_called_once()
        mock_cursor.close.assert_called_once()

    @patch("src.core.database.psycopg2.connect")
    def test_get_cursor_rolls_back_on_error(self, mock_connect):
        mock_connection = MagicMock()
        mock_cursor = MagicMock()
        mock_cursor.execute.side_effect = Exception("Query failed")
        mock_connection.cursor.return_value = mock_cursor
        mock_connect.return_value = mock_connection

        conn = connect()

        with pytest.raises(Exception, match="Query failed"):  # noqa: SIM117
            with conn.get_cursor() as cursor:
                cursor.execute("BAD SQL")

        mock_connection.rollback.assert_called_once()
        mock_connection.commit.assert_not_called()
        mock_cursor.close.assert_called_once()

    @patch("src.core.database.psycopg2.connect")
    def test_execute_query(self, mock_connect):
        mock_connection = MagicMock()
        mock_cursor = MagicMock()
        mock_connection.cursor.return_value = mock_cursor
        mock_connect.return_value = mock_connection

        conn = connect()

        assert conn.execute_query("DELETE FROM utilization_snapshots") is True
        mock_cursor.execute.assert_called_once_with("DELETE FROM utilization_snapshots", {})

        mock_cursor.execute.side_effect = Exception("Query error")
        assert conn.execute_query("BAD QUERY") is False

    @patch("src.core.database.psycopg2.connect")
    def test_check_health(self, mock_connect):
        mock_connection = MagicMock()
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = (1,)
        mock_connection.cursor.return_value = mock_cursor
        mock_connect.return_value = mock_connection

        conn = connect()
        assert conn.check_health() is True

        mock_cursor.fetchone.return_value = (0,)
        assert conn.check_health() is False

        mock_connection.cursor.side_effect = Exception("Connection lost")
        assert conn.check_health() is False

    @patch("src.core.database.psycopg2.connect")
    def test_close(self, mock_connect):
        mock_connection = MagicMock()
        mock_connect.return_value = mock_connection

        conn = connect()
        conn.close()
        mock_connection.close.assert_called_once()

        conn.connection = None
        conn.close()
