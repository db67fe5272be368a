"""Module entrypoint for ``python -m cstream_ingest``."""
from __future__ import annotations

from .cli import main


if __name__ == "__main__":
    main()
