"""Hello-world server package.

Exposes the package version; the app factory lives in `helloapp.main`.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("http-selftest")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
