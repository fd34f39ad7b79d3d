# deployhook/__main__.py
import argparse
import logging
import sys

from . import create_app
from .config import load_settings
from .errors import ConfigError

logger = logging.getLogger("deployhook")


def configure_logging(log_file: str, level=logging.INFO) -> None:
    logging.basicConfig(
        filename=log_file,
        filemode="a",
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="deployhook", description="Build webhook receiver")
    parser.add_argument("-config", "--config", dest="config", required=True, help="Config file")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config).validate()
    except ConfigError as exc:
        for message in exc.messages:
            print(f"ERROR: {message}", file=sys.stderr)
        print("Unable to continue due to validation error(s).", file=sys.stderr)
        return 1

    print(f"Using config: {args.config}\n")
    configure_logging(settings.log_file)

    app = create_app(settings)
    ssl_context = (settings.tls_cert, settings.tls_key) if settings.tls_enabled else None
    logger.info("Listening on %s:%s (tls=%s)", settings.host, settings.port, settings.tls_enabled)
    app.run(host=settings.host, port=settings.port, ssl_context=ssl_context, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
