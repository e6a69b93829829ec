import sys

from git_housekeeper.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
