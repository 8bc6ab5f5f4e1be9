"""
Global config facade: delegates to app.core.settings.
Prefer importing get_settings() or Settings from app.core in new code.
"""
from pathlib import Path

from app.core.settings import get_settings

_s = get_settings()

# Paths
BASE_DIR: Path = _s.base_dir

# Ops
LOG_FILE: str = _s.log_file
LOG_LEVEL: str = _s.log_level

# HTTP server
API_HOST: str = _s.api_host
API_PORT: int = _s.api_port

# MySQL
MYSQL_HOST: str = _s.mysql_host
MYSQL_PORT: int = _s.mysql_port
MYSQL_USER: str = _s.mysql_user
MYSQL_PASSWORD: str = _s.mysql_password
MYSQL_DATABASE: str = _s.mysql_database
