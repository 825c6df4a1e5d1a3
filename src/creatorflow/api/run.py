from creatorflow.core.config import get_settings
import uvicorn


def main():  # pragma: no cover
    """Console entry point (``creatorflow-api``)."""
    settings = get_settings()
    uvicorn.run(
        "creatorflow.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        # auto-reload only on a developer machine
        reload=settings.environment == "local",
    )


if __name__ == "__main__":  # pragma: no cover
    main()
