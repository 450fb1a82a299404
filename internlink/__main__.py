"""Run with: python -m internlink"""

import uvicorn

from internlink.core.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("internlink.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
