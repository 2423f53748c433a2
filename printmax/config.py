import logging
import os
from dataclasses import dataclass

@dataclass(frozen=True)
class Settings:
    data_path: str = "printmax_enquiries_v1.json"
    # Where ``export`` writes backups when no --output is given
    backup_dir: str = "."
    log_level: str = "INFO"

def _log_level(name: str, default: str) -> str:
    # getLevelName maps a known level name to its number
    if name and isinstance(logging.getLevelName(name), int):
        return name
    return default

def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        data_path=os.getenv("PRINTMAX_DATA_PATH", "").strip() or defaults.data_path,
        backup_dir=os.getenv("PRINTMAX_BACKUP_DIR", "").strip() or defaults.backup_dir,
        log_level=_log_level(
            os.getenv("PRINTMAX_LOG_LEVEL", "").strip().upper(), defaults.log_level
        ),
    )
