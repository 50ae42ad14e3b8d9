"""Allow running as ``python -m dh2ecr``."""

from .main import main

main()
