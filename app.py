import asyncio
import logging
import logging.handlers
from wsrelay.config import settings
from wsrelay.ws_server import run_ws_server

def setup_logging():
    loglevel = settings.LOG_LEVEL.upper()
    # основной лог в stdout
    logging.basicConfig(
        level=loglevel,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    if settings.DEBUG_WS:
        logging.getLogger("websockets").setLevel(logging.DEBUG)
    # отдельный логгер для покадровой диагностики
    diag_logger = logging.getLogger("ws_diag")
    diag_logger.setLevel(logging.INFO)
    if settings.DIAG_LOGFILE:
        handler = logging.handlers.RotatingFileHandler(
            settings.DIAG_LOGFILE, maxBytes=10 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter("%(asctime)s | %(message)s"))
        diag_logger.addHandler(handler)

async def main():
    setup_logging()
    logging.info(f"Старт сервиса, DEBUG_WS={settings.DEBUG_WS}")
    await run_ws_server(port=settings.PORT, host=settings.HOST)

def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    run()
