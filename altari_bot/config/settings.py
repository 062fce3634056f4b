import os
from functools import lru_cache

from pydantic import BaseModel


class Settings(BaseModel):
    BOT_TOKEN: str
    GITHUB_WEBHOOK_SECRET: str = ""
    SERVER_DEV: bool = False
    HTTP_PORT: int = 21092
    HTTPS_PORT: int = 21093
    KIS_PROXY_URL: str = "http://localhost:26704"

    @property
    def listen_port(self) -> int:
        return self.HTTP_PORT if self.SERVER_DEV else self.HTTPS_PORT

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "BOT_TOKEN": os.getenv("CHEAP_ALTARI_BOT_TOKEN"),
            "GITHUB_WEBHOOK_SECRET": os.getenv("CHEAP_ALTARI_BOT_GITHUB_WEBHOOK_SECRET", ""),
            "SERVER_DEV": os.getenv("CHEAP_ALTARI_BOT_SERVER_DEV") == "1",
        }
        for field, env_name in (
            ("HTTP_PORT", "CHEAP_ALTARI_BOT_HTTP_PORT"),
            ("HTTPS_PORT", "CHEAP_ALTARI_BOT_HTTPS_PORT"),
            ("KIS_PROXY_URL", "CHEAP_ALTARI_BOT_KIS_PROXY_URL"),
        ):
            raw = os.getenv(env_name)
            if raw:
                values[field] = raw

        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
