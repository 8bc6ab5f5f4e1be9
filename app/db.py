"""
MySQL connection and schema bootstrap. Creates the users table if not exists.
"""
import logging
import pymysql
from contextlib import contextmanager

import config

logger = logging.getLogger(__name__)

# Set to False if init_db() failed (e.g. MySQL not running or wrong credentials)
db_available = True

# The UNIQUE key on email is what makes registration race-free; the
# repository's existence check only rejects duplicates early.
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
  id BIGINT AUTO_INCREMENT PRIMARY KEY,
  email VARCHAR(255) NOT NULL UNIQUE,
  password VARCHAR(255) NOT NULL,
  full_name VARCHAR(255) NOT NULL DEFAULT '',
  profile_picture VARCHAR(1024) NOT NULL DEFAULT '',
  bio TEXT NOT NULL,
  phone_number VARCHAR(32) NOT NULL DEFAULT '',
  role VARCHAR(32) NOT NULL DEFAULT 'user',
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  deleted_at BIGINT NOT NULL DEFAULT 0,
  INDEX idx_email_deleted (email, deleted_at)
);
"""


@contextmanager
def get_connection():
    conn = pymysql.connect(
        host=config.MYSQL_HOST,
        port=config.MYSQL_PORT,
        user=config.MYSQL_USER,
        password=config.MYSQL_PASSWORD,
        database=config.MYSQL_DATABASE,
        cursorclass=pymysql.cursors.DictCursor,
    )
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _ensure_database_exists():
    """Create the database if it does not exist (connect without database first)."""
    # Escape backticks in identifier for safe SQL
    db_name = config.MYSQL_DATABASE.replace("`", "``")
    conn = pymysql.connect(
        host=config.MYSQL_HOST,
        port=config.MYSQL_PORT,
        user=config.MYSQL_USER,
        password=config.MYSQL_PASSWORD,
        cursorclass=pymysql.cursors.DictCursor,
    )
    try:
        with conn.cursor() as cur:
            cur.execute("CREATE DATABASE IF NOT EXISTS `%s`" % db_name)
        conn.commit()
    finally:
        conn.close()


def init_db() -> bool:
    """Create database and users table if not exists. Returns True on success."""
    global db_available
    try:
        _ensure_database_exists()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(CREATE_USERS_TABLE)
        db_available = True
        return True
    except pymysql.MySQLError as e:
        logger.warning("MySQL init_db failed: %s. Set MYSQL_* in .env and ensure MySQL is running.", e)
        db_available = False
        return False


def ping() -> bool:
    """Round-trip a trivial query. Returns False when the database is unreachable."""
    try:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
        return True
    except pymysql.MySQLError as e:
        logger.debug("MySQL ping failed: %s", e)
        return False
