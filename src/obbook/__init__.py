"""Top-level package for the Oblivion book compiler.

Provides subpackages:
- obbook.core – node, diagnostic and asset models
- obbook.compiler – parser, normalizer, validation and DESC export
- obbook.assets – data directory resolution and the asset index
- obbook.layout – text flow and inline image placement
- obbook.output – preview bitmap rendering
- obbook.engine – the facade the editor shell talks to
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("obbook")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

from .config import ProjectSettings  # noqa: E402
from .engine import BookEngine, CompileResult, EngineError  # noqa: E402

__all__: list[str] = [
    "__version__",
    "ProjectSettings",
    "BookEngine",
    "CompileResult",
    "EngineError",
]
