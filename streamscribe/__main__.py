"""Allow ``python -m streamscribe``."""

from streamscribe.main import main

main()
