"""
Command line interface for the Folder Queue Publisher.

Every option can also be provided through the environment or a .env file;
command line values take precedence.
"""

import argparse
import sys
from typing import Dict, List, Optional

from folder_publisher import __version__
from folder_publisher.app import create_app


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="folder-queue-publisher",
        description="Watch a folder and publish new or changed files to a message queue.",
        epilog="Values not given on the command line are read from the environment "
               "(QUEUE_SERVER_URL, QUEUE_USER, QUEUE_PASSWORD, QUEUE_NAME, SOURCE_FOLDER, "
               "TARGET_FOLDER, FILE_EXTENSION, ENABLE_HEADERS, POLLING_INTERVAL, SSL_*)."
    )
    parser.add_argument("-s", "--server", metavar="url",
                        help='Queue server URL: "tcp://192.168.56.202:61613" or "ssl://..."')
    parser.add_argument("-u", "--user", metavar="user name", help="Queue user")
    parser.add_argument("-p", "--pass", dest="password", metavar="password", help="Queue password")
    parser.add_argument("-q", "--queue", metavar="name", help="Queue name")
    parser.add_argument("-d", "--source", metavar="directory", help="Source directory")
    parser.add_argument("-t", "--target", metavar="directory", help="Target directory")
    parser.add_argument("-e", "--extension", metavar="file extension",
                        help="Files to pick up (default: .xml)")
    parser.add_argument("-H", "--headers", action="store_true", default=None,
                        help="Top of file includes headers that end at an empty line (Header Name: Header Value)")
    parser.add_argument("-i", "--interval", type=float, metavar="seconds",
                        help="Polling interval in seconds (default: 5, minimum: 2)")
    parser.add_argument("--ssl-client-key", metavar="file", help="SSL client key file")
    parser.add_argument("--ssl-ca", metavar="file", help="SSL certificate authority file")
    parser.add_argument("--ssl-server-key", metavar="file", help="SSL server key file")
    parser.add_argument("--ssl-pass", metavar="password", help="SSL password")
    parser.add_argument("--env-file", default=".env", help="Path to a .env file (default: .env)")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def to_overrides(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    """Map parsed arguments to configuration variable names."""
    return {
        'QUEUE_SERVER_URL': args.server,
        'QUEUE_USER': args.user,
        'QUEUE_PASSWORD': args.password,
        'QUEUE_NAME': args.queue,
        'SOURCE_FOLDER': args.source,
        'TARGET_FOLDER': args.target,
        'FILE_EXTENSION': args.extension,
        'ENABLE_HEADERS': 'true' if args.headers else None,
        'POLLING_INTERVAL': str(args.interval) if args.interval is not None else None,
        'SSL_CLIENT_KEY': args.ssl_client_key,
        'SSL_CA': args.ssl_ca,
        'SSL_SERVER_KEY': args.ssl_server_key,
        'SSL_PASSWORD': args.ssl_pass
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    print(f"Folder Queue Publisher v{__version__}")
    app = create_app(env_file=args.env_file, log_file=args.log_file, cli_overrides=to_overrides(args))
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
