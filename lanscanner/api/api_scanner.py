"""API endpoints for controlling LAN scans"""
from typing import List

from fastapi import FastAPI, HTTPException

from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
from lanscanner.lanscanner_types.exceptions import ScannerError
from lanscanner.scanner.scan_controller import ScanController

logger = get_logger(__name__)


class APIScanner:
    """Expose the scan controller via the REST API."""

    def __init__(self, app: FastAPI, scan_controller: ScanController):
        self._app = app
        self._scan_controller = scan_controller
        self._app.add_api_route(
            "/scan/start",
            self.start_scan,
            methods=["POST"],
            tags=["Scan"],
        )
        self._app.add_api_route(
            "/scan/stop",
            self.stop_scan,
            methods=["POST"],
            tags=["Scan"],
        )
        self._app.add_api_route(
            "/scan/status",
            self.get_status,
            methods=["GET"],
            tags=["Scan"],
        )
        self._app.add_api_route(
            "/scan/devices",
            self.get_discovered_devices,
            methods=["GET"],
            tags=["Scan"],
        )

    async def start_scan(self):
        """Start a 30 second scan, returns once browsing has begun."""
        try:
            await self._scan_controller.start()
        except ScannerError as exc:
            logger.exception("Failed to start scan")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"scanning": True}

    async def stop_scan(self):
        """Stop the running scan."""
        try:
            await self._scan_controller.stop()
        except ScannerError as exc:
            logger.exception("Failed to stop scan")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"scanning": False}

    async def get_status(self):
        """Return whether a scan is in progress."""
        return {"scanning": await self._scan_controller.is_scanning()}

    async def get_discovered_devices(self) -> List[dict]:
        """Return every device found by the current or last scan."""
        devices = await self._scan_controller.get_discovered_devices()
        return [device.to_payload() for device in devices]
