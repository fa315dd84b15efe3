import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = '') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, '').strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, '').strip()
    return float(raw) if raw else default


class Config:
    """Settings read from the environment (and ``.env``) at import time"""

    # Discord
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = _env_int('DISCORD_GUILD_ID', 0)
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # comma-separated
    OWNER_DISCORD_ID = _env_int('OWNER_DISCORD_ID', 0)
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')

    # Logging
    DEBUG = _env_flag('DEBUG')
    API_DEBUG = _env_flag('PLAYHUB_API_DEBUG')

    # PlayHub upstream
    PLAYHUB_API_BASE = os.getenv('PLAYHUB_API_BASE', 'https://api.cloudflare.ravensburgerplay.com/hydraproxy/api/v2')
    PLAYHUB_WEB_BASE = os.getenv('PLAYHUB_WEB_BASE', 'https://tcg.ravensburgerplay.com')
    PLAYHUB_GAME_SLUG = os.getenv('PLAYHUB_GAME_SLUG', 'disney-lorcana')
    PLAYHUB_GAME_ID = _env_int('PLAYHUB_GAME_ID', 1)

    # Geocoding (OpenStreetMap Nominatim requires an identifying User-Agent)
    NOMINATIM_URL = os.getenv('NOMINATIM_URL', 'https://nominatim.openstreetmap.org/search')
    GEOCODER_USER_AGENT = os.getenv('GEOCODER_USER_AGENT', 'playhub-leaderboard-bot/1.0')

    # HTTP
    HTTP_TIMEOUT_SECONDS = _env_float('HTTP_TIMEOUT_SECONDS', 15.0)
    HTTP_MAX_RETRIES = _env_int('HTTP_MAX_RETRIES', 3)
    HTTP_RETRY_DELAY_SECONDS = _env_float('HTTP_RETRY_DELAY_SECONDS', 1.0)

    @classmethod
    def get_guild_ids(cls) -> List[int]:
        """Guilds to sync slash commands to; empty means a global sync"""
        raw = [part.strip() for part in cls.DISCORD_GUILD_IDS.split(',') if part.strip()]
        if raw:
            try:
                return [int(part) for part in raw]
            except ValueError:
                raise ValueError(f"DISCORD_GUILD_IDS must be comma-separated integers, got {cls.DISCORD_GUILD_IDS!r}")
        return [cls.DISCORD_GUILD_ID] if cls.DISCORD_GUILD_ID else []

    @classmethod
    def validate(cls):
        """Raise ValueError listing every missing or invalid setting"""
        problems = []
        if not cls.DISCORD_TOKEN:
            problems.append("DISCORD_TOKEN is required")
        if not cls.DISCORD_GUILD_ID and not cls.DISCORD_GUILD_IDS:
            problems.append("DISCORD_GUILD_ID or DISCORD_GUILD_IDS is required")
        if not cls.OWNER_DISCORD_ID:
            problems.append("OWNER_DISCORD_ID is required")
        if not cls.PLAYHUB_API_BASE.startswith(('http://', 'https://')):
            problems.append("PLAYHUB_API_BASE must be an http(s) URL")
        if cls.HTTP_MAX_RETRIES < 0:
            problems.append("HTTP_MAX_RETRIES must be zero or greater")
        if cls.HTTP_TIMEOUT_SECONDS <= 0:
            problems.append("HTTP_TIMEOUT_SECONDS must be positive")
        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))
        cls.get_guild_ids()
