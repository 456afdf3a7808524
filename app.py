import asyncio
import logging
import os
import sys

from ssestream import AppConfig, ServerRefusedRetry, SSEClient

logger = logging.getLogger(__name__)


async def main():
    logging_config = {
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
        "level": logging.DEBUG if "--debug" in sys.argv else logging.INFO,
    }
    if "--logfile" in sys.argv:
        logging_config["filename"] = "ssestream.log"
        logging_config["filemode"] = "w+"
        logging_config["encoding"] = "utf-8"
    logging.basicConfig(**logging_config)

    config_file = "config.json"
    if not os.path.exists(config_file):
        default = AppConfig()
        with open(config_file, "w+", encoding="utf-8") as fp:
            fp.write(default.model_dump_json(indent=4))
        print("Edit config.json and relaunch app")
        sys.exit(0)

    with open(config_file, "r", encoding="utf-8") as fp:
        config = AppConfig.model_validate_json(fp.read())
    try:
        async with SSEClient(config.url, config) as client:
            async for event in client:
                print(f"[{event.event}] {event.data}", flush=True)
    except ServerRefusedRetry as e:
        logger.critical("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
