from pydantic_settings import SettingsConfigDict, BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "setracker-gateway"
    PROD: bool = False

    # Primary database connection
    DATABASE_URL: str = "sqlite:///./setracker.db"

    @property
    def DATABASE_URI(self) -> str:
        """Backward compatibility for DATABASE_URI"""
        return self.DATABASE_URL

    # GPS TCP Server configuration
    GPS_TCP_ENABLED: bool = True
    GPS_TCP_HOST: str = "0.0.0.0"
    GPS_TCP_PORT: int = 9001
    GPS_TCP_MAX_CONNECTIONS: int = 1000
    GPS_TCP_CONNECTION_TIMEOUT: int = 300  # seconds of inactivity before close
    GPS_TCP_MAX_BUFFER_SIZE: int = 65536  # image frames can be large
    GPS_TCP_SO_LINGER: int = 10  # seconds a closing socket waits to flush

    # Logging
    LOG_FILE: Optional[str] = "./logs/logs.log"

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')


settings = Settings()
