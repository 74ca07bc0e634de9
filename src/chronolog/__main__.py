from __future__ import annotations

from chronolog.interface.cli.app import main

if __name__ == "__main__":
    raise SystemExit(main())
