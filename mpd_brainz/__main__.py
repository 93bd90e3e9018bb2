"""Main module to run mpd-brainz."""

import argparse
import logging
import sys
import threading

from mpd_brainz import CLIENT_NAME, __version__
from mpd_brainz.config import Config, load_config
from mpd_brainz.configure_logging import configure_logging
from mpd_brainz.errors import ConfigError, FetchError, SubmissionError
from mpd_brainz.listenbrainz import ListenBrainzClient
from mpd_brainz.player import MPDPlayer
from mpd_brainz.scrobbler import Scrobbler, install_signal_handlers
from mpd_brainz.shazam import import_shazam

logger = logging.getLogger("mpd_brainz")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=CLIENT_NAME,
        description="Scrobble MPD playback to ListenBrainz.",
    )
    parser.add_argument(
        "-v", dest="verbose", action="store_true", help="Enable debug logs."
    )
    parser.add_argument(
        "-V", dest="print_version", action="store_true", help="Print version number."
    )
    parser.add_argument(
        "-i", dest="import_shazam", default="", help="Import Shazam Library."
    )
    parser.add_argument("-l", dest="log_path", default="", help="Set log file.")
    parser.add_argument("-c", dest="config_path", default="", help="Config file.")
    parser.add_argument(
        "--check-token",
        action="store_true",
        help="Validate the ListenBrainz token before starting.",
    )
    return parser.parse_args(argv)


def check_token(client: ListenBrainzClient) -> bool:
    """Log who the token belongs to, False if ListenBrainz refuses it."""
    user_name = client.validate_token()
    if user_name is None:
        return False
    logger.info(f"Authenticated to ListenBrainz as {user_name}")
    return True


def scrobble(conf: Config, client: ListenBrainzClient) -> None:
    """Scrobble MPD playback until interrupted."""
    stop = threading.Event()
    install_signal_handlers(stop)
    with MPDPlayer(conf.mpd_address, conf.mpd_password) as player:
        Scrobbler(player, client, conf.polling_interval_seconds).run(stop)


def main(argv: list[str] | None = None) -> int:
    """Run mpd-brainz.

    Args:
        argv: Command line arguments, defaults to sys.argv.

    Returns:
        int: Process exit code.

    """
    args = parse_args(argv)
    if args.print_version:
        print(f"{CLIENT_NAME} v{__version__}")
        return 0

    # Log to stdout until the configuration tells where logs go
    configure_logging(verbose=args.verbose)
    try:
        conf = load_config(args.config_path or None)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        return 1
    configure_logging(conf.log_path(args.log_path), verbose=args.verbose)

    client = ListenBrainzClient(conf.listenbrainz_token, timeout=conf.request_timeout)
    try:
        if args.check_token and not check_token(client):
            return 1
        if args.import_shazam:
            import_shazam(args.import_shazam, client)
        else:
            scrobble(conf, client)
    except SubmissionError as e:
        logger.error(f"Error talking to ListenBrainz: {e}")
        return 1
    except (FetchError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
