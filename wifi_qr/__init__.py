"""Generate QR codes that join a WiFi network when scanned."""

__version__ = "0.1.0"
