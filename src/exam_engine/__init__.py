"""Top-level package for the exam attempt engine.

Provides subpackages:
- exam_engine.core – typed models for assessments, attempts and violations
- exam_engine.grading – answer normalisation and auto-grading
- exam_engine.timing – countdown timer and tickers
- exam_engine.proctoring – window-focus violation monitor
- exam_engine.persistence – idempotent attempt/response storage
- exam_engine.catalog – read-only question and assessment lookup
- exam_engine.session – the attempt session state machine
- exam_engine.gui – optional Qt adapters
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    import sys
    from pathlib import Path
    
    # In dev mode, read directly from pyproject.toml
    if not getattr(sys, 'frozen', False):
        pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    else:
        pyproject = Path(getattr(sys, "_MEIPASS", ".")) / "pyproject.toml"
    
    if pyproject.exists():
        try:
            for line in pyproject.read_text().splitlines():
                if line.strip().startswith("version"):
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass
    
    from importlib.metadata import version as pkg_version, PackageNotFoundError
    try:
        return pkg_version("exam-engine")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
