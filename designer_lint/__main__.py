"""Entry point for ``python -m designer_lint``."""

from designer_lint.main import main

if __name__ == "__main__":
    raise SystemExit(main())
