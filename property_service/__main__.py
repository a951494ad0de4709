import uvicorn

from property_service.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "property_service.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
