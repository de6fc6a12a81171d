import uvicorn

from estatelink.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "estatelink.main:app",
        host=settings.bind_host,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
