"""
Entry point for running DocTrans-LLMs as a module.

Usage:
    python -m doctrans_llms --help
    python -m doctrans_llms translate --backend dummy
    python -m doctrans_llms info
"""
from doctrans_llms.cli import app


if __name__ == "__main__":
    app()
