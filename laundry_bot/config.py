import os
from dataclasses import dataclass


def _flag(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "laundry_data.json"
    # Seconds between background status sweeps
    sweep_seconds: float = 60.0
    # IANA zone the laundry room runs in; empty means the host's local time
    timezone: str = ""
    # Set to True to sync commands per guild for faster propagation
    sync_per_guild: bool = True
    log_level: str = "INFO"


def load_settings() -> Settings:
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    return Settings(
        token=token or "",
        data_path=os.getenv("LAUNDRY_DATA_PATH", "").strip() or "laundry_data.json",
        sweep_seconds=float(os.getenv("LAUNDRY_SWEEP_SECONDS", "60") or 60),
        timezone=os.getenv("LAUNDRY_TIMEZONE", "").strip(),
        sync_per_guild=_flag(os.getenv("LAUNDRY_SYNC_PER_GUILD", "true")),
        log_level=os.getenv("LAUNDRY_LOG_LEVEL", "").strip() or "INFO",
    )
