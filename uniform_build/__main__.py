"""Allow ``python -m uniform_build``."""

from uniform_build.cli import main

if __name__ == "__main__":
    main()
