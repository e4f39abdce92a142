from app.ui.gradio_app import create_app
from config.logger import logger
from config.settings import config

demo = create_app()


def main() -> None:
    logger.info(f"Starting NeuroScanX on {config.SERVER_HOST}:{config.PORT} (mock services: {config.USE_MOCK_SERVICES})")
    demo.queue(default_concurrency_limit=config.CONCURRENCY_LIMIT).launch(
        server_name=config.SERVER_HOST,
        server_port=config.PORT,
        allowed_paths=[str(config.TEMP_DIR)],
    )


if __name__ == "__main__":
    main()
