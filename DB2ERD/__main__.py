import sys

from DB2ERD.cli import main

if __name__ == "__main__":
    sys.exit(main())
