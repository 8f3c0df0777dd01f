"""PixelReel entrypoint."""

import uvicorn

from pixelreel.config.settings import get_settings


def cli() -> None:
    """CLI entrypoint."""
    settings = get_settings()
    uvicorn.run(
        "pixelreel.web.app:create_app",
        factory=True,
        host="0.0.0.0",  # noqa: S104
        port=3001,
        reload=settings.debug,
    )


if __name__ == "__main__":
    cli()
