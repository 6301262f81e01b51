"""
Run the API with uvicorn: ``python -m relief_api``.
"""

import uvicorn

from relief_api.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("relief_api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
