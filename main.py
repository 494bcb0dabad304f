"""Run the chat API server.

Just run: uv run python main.py

The first chat request starts a one-time background crawl and index of
SITE_URL; questions are answered right away with whatever is indexed so far.
"""

import uvicorn

from sitechat.config.settings import get_settings
from sitechat.server import create_app
from sitechat.utils.logger import configure_logging


def main():
    """Configure logging and serve the API."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)

    print("=" * 80)
    print("sitechat - Support Chat API")
    print("=" * 80)
    print(f"  • Site: {settings.site_url}")
    print(f"  • Listening on: http://{settings.host}:{settings.port}")
    print("=" * 80)

    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
