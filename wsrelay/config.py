"""
Конфигурация WS-релея. Использует pydantic-settings для загрузки переменных окружения.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()  # Загрузить переменные из .env файла

class Settings(BaseSettings):
    """
    Конфигурация приложения. Все значения берутся из ENV или .env файла.
    Отсутствие любой переменной влияет только на подробность логов и телеметрию.
    """
    HOST: str = Field(default="0.0.0.0", description="Адрес для прослушивания")
    PORT: int = Field(default=10000, description="Порт HTTP + WebSocket сервера")
    WS_PATH: str = Field(default="/ws", description="Путь для upgrade на WebSocket")
    LOG_LEVEL: str = Field(default="INFO", description="Уровень логирования")
    DEBUG_WS: bool = Field(default=False, description="Подробные логи, heartbeat и периодический broadcast")
    DEBUG_PREVIEW: int = Field(default=128, ge=0, description="Сколько байт бинарного кадра показывать в логе")
    DEBUG_HEARTBEAT: int = Field(default=30000, gt=0, description="Интервал heartbeat, мс")
    DEBUG_BROADCAST: int = Field(default=60000, gt=0, description="Интервал broadcast, мс")
    WELCOME_MSG: str = Field(default="Hello from WS relay server", description="Текст приветствия")
    DIAG_LOGFILE: str = Field(default="", description="Файл для покадрового лога (пусто = выключен)")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def heartbeat_interval(self) -> float:
        return self.DEBUG_HEARTBEAT / 1000

    @property
    def broadcast_interval(self) -> float:
        return self.DEBUG_BROADCAST / 1000

settings = Settings()
