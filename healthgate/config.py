"""Process settings — loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime knobs that are not part of the YAML check configuration."""

    model_config = {
        "env_prefix": "HEALTHGATE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Check configuration file (overridden by --config)
    config_path: str = "/etc/postfix/healthgate.yaml"

    # Mount enumeration
    mount_table: str = "/proc/mounts"
    nfs_fs_types: tuple[str, ...] = ("nfs", "nfs4")
    nfs_timeout: float = 5.0  # seconds per mount point, one value for the whole run

    # SSSD
    sssctl_path: str = "sssctl"  # resolved on PATH
    sssctl_timeout: float = 10.0

    # Logging
    syslog_address: str = "/dev/log"
    syslog_facility: str = "mail"
    log_level: str = "INFO"


settings = Settings()
