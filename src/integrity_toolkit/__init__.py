"""Top-level package for the Workspace Integrity Toolkit.

Provides subpackages:
- integrity_toolkit.core – package/workspace models, schemas, manifest utilities
- integrity_toolkit.registry – workspace discovery and manifest loading
- integrity_toolkit.resolution – canonical dependency version resolution
- integrity_toolkit.imports – import extraction from TypeScript sources
- integrity_toolkit.integrity – validator, aggregator, hoister and controller
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    # Fallback to importlib.metadata for installed package
    try:
        from importlib.metadata import version as pkg_version, PackageNotFoundError
        return pkg_version("integrity_toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
