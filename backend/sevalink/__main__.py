"""Run the API with ``python -m sevalink``."""

import uvicorn

from sevalink.settings import settings


def main() -> None:
	uvicorn.run(
		"sevalink.main:app",
		host=settings.api_host,
		port=settings.api_port,
		reload=settings.is_dev(),
		log_config=None,
	)


if __name__ == "__main__":
	main()
