"""Default configuration values.

The defaults describe the classic PHP stack: php-fpm behind nginx, with
php-fpm's error log forwarded to stderr.

Note: DEFAULT_CONFIG is a plain dict so it can be fed to deep_merge, which
copies everything it returns.
"""

from typing import Any

DEFAULT_CONFIG_FILENAME = "tandem.toml"

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "supervisor": {
        "port": 8080,
        "grace_period": 3.0,
    },
    "logging": {
        "level": "warning",
        "format": "text",
        "file": "",
    },
    "logs": {
        "paths": [],
        "poll_interval": 0.25,
        "drain_timeout": 1.0,
    },
    "app_server": {
        "command": ["php-fpm", "--nodaemonize"],
        "env": {},
        "cwd": "",
        "settle_delay": 1.0,
    },
    "front_end": {
        "command": ["nginx", "-g", "daemon off;"],
        "env": {},
        "cwd": "",
        "settle_delay": 0.0,
    },
}
