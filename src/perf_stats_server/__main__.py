"""Module entrypoint.

Allows:
    python -m perf_stats_server
"""

from __future__ import annotations

from perf_stats_server.server.stats_server import main

if __name__ == "__main__":
    main()
