# src/services/db.py
# Responsibility: Provides centralized database connection management and transaction handling.

import logging

import psycopg2

from src.config.settings import settings

logger = logging.getLogger(__name__)


def get_raw_connection():
    """
    Creates and returns a raw psycopg2 connection.

    Returns:
        psycopg2.extensions.connection: A new database connection.
    """
    conn = psycopg2.connect(
        settings.DB.URL,
        connect_timeout=settings.DB.CONNECT_TIMEOUT_SECONDS,
        options=f"-c statement_timeout={settings.DB.STATEMENT_TIMEOUT_MS}",
    )
    conn.autocommit = False
    return conn


class DBTransaction:
    """
    Context manager for database transactions.
    Commits on success, rolls back on exception, and always closes the connection.

    Usage:
        with DBTransaction() as conn:
            with conn.cursor() as cur:
                cur.execute(...)
    """
    def __init__(self):
        self.conn = None

    def __enter__(self):
        try:
            self.conn = get_raw_connection()
            return self.conn
        except psycopg2.Error as e:
            logger.error("[DB] Connection failed: %s", e)
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            try:
                if exc_type:
                    self.conn.rollback()
                    logger.warning("[DB] Transaction rolled back due to error: %s", exc_val)
                else:
                    self.conn.commit()
            except psycopg2.Error as e:
                # The original exception, if any, still propagates.
                logger.error("[DB] Transaction finalization failed: %s", e)
            finally:
                self.conn.close()
