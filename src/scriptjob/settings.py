from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCRIPTJOB_", env_file=".env", extra="ignore"
    )

    # Logging
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    # Constants exposed to guest scripts
    organization_name: str = "scriptjob"
    organization_domain: str = "scriptjob.org"
    application_name: str = "scriptjob"
    version: str = "0.1.0"
    version_short: str = "0.1"

    # Target environment commands run through chroot <rootMountPoint>
    do_chroot: bool = True

    # Extra gettext search directories, searched first
    locale_dirs: List[str] = []

    mount_timeout: int = 10

    # Name guest scripts import the host API under
    host_module_name: str = "libinstaller"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
