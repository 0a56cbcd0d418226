"""Allow running with ``python -m permit2swap``."""

from permit2swap.main import main

if __name__ == "__main__":
    main()
