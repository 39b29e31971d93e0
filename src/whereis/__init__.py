"""
whereis - IP geolocation from the command line

Resolves IP addresses to country, city, coordinates and time zone with the
Fastah API, optionally side by side with a local GeoLite2-City database.
"""

__version__ = "1.0.0"
__author__ = "Blackbuck Computing Inc."


# Lazy imports to avoid loading httpx and geoip2 when only the version is needed
def __getattr__(name):
    """Lazy loading of package components to avoid unnecessary imports."""
    if name == "LocationRecord":
        from .models import LocationRecord

        return LocationRecord
    elif name == "FastahClient":
        from .fastah import FastahClient

        return FastahClient
    elif name == "run_batch":
        from .batch import run_batch

        return run_batch
    elif name == "AppSettings":
        from .config import AppSettings

        return AppSettings
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define the public API of the package
__all__ = [
    "LocationRecord",
    "FastahClient",
    "run_batch",
    "AppSettings",
    "__version__",
    "__author__",
]
