import uvicorn

from photofeed.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "photofeed.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
