#!/usr/bin/env python3
"""LAN Scanner"""
import argparse
import os


def parse_arguments():
    """Parse command-line arguments and set environment variables"""
    parser = argparse.ArgumentParser(
        description='LAN Scanner - Discovers Bluesound, Volumio, Spotify Connect and Qobuz Connect devices over mDNS',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--api-port', type=int, default=8080,
                        help='Port FastAPI runs on')
    parser.add_argument('--api-host', type=str, default='0.0.0.0',
                        help='Host FastAPI binds to')
    parser.add_argument('--logs-dir', type=str, default=None,
                        help='Directory logs are stored in')
    parser.add_argument('--console-log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level for stdout')
    parser.add_argument('--log-to-file', type=str, default='False',
                        choices=['True', 'False', 'true', 'false'],
                        help='Determines whether logs are written to files')
    parser.add_argument('--log-entries-to-retain', type=int, default=2,
                        help='Number of previous runs to retain logs for')
    parser.add_argument('--mdns-resolve-timeout-ms', type=int, default=3000,
                        help='How long to wait for an advertised service to resolve')

    args = parser.parse_args()

    # Only set if not already set in environment
    env_mappings = {
        'API_PORT': str(args.api_port),
        'API_HOST': args.api_host,
        'CONSOLE_LOG_LEVEL': args.console_log_level,
        'LOG_TO_FILE': args.log_to_file,
        'LOG_ENTRIES_TO_RETAIN': str(args.log_entries_to_retain),
        'MDNS_RESOLVE_TIMEOUT_MS': str(args.mdns_resolve_timeout_ms),
    }
    if args.logs_dir:
        env_mappings['LOGS_DIR'] = args.logs_dir

    for env_var, value in env_mappings.items():
        if env_var not in os.environ:
            os.environ[env_var] = value

    return args


def main():
    # Constants are read from the environment at import time
    parse_arguments()

    # pylint: disable=import-outside-toplevel
    import uvicorn
    from fastapi import FastAPI

    import lanscanner.constants.constants as constants
    from lanscanner.api.api_scanner import APIScanner
    from lanscanner.api.api_websocket_scan import APIWebsocketScan
    from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
    from lanscanner.lanscanner_types.exceptions import ScannerError
    from lanscanner.scanner.scan_controller import ScanController
    from lanscanner.utils.utils import set_process_name

    logger = get_logger(__name__)
    set_process_name("lanscanner", "LAN Scanner")

    app: FastAPI = FastAPI(title="LAN Scanner",
            description="Discovers media devices on the local network over mDNS",
            version="0.1.0",
            openapi_tags=[
            {
                "name": "Scan",
                "description": "API endpoints for starting, stopping and reading scans"
            },
        ])

    websocket_scan: APIWebsocketScan = APIWebsocketScan(app)
    scan_controller: ScanController = ScanController(emitter=websocket_scan)
    APIScanner(app, scan_controller)
    logger.info("lan-scanner initialized")

    @app.on_event("shutdown")
    async def on_shutdown():
        """Stop any running scan so the mDNS daemon is released"""
        try:
            await scan_controller.stop()
        except ScannerError as exc:
            logger.error("Error stopping scan during shutdown: %s", exc)

    config = uvicorn.Config(app=app,
                            port=constants.API_PORT,
                            host=constants.API_HOST,
                            timeout_keep_alive=30)
    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    main()
