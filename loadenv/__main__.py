import sys

from loadenv.cli.main import main

sys.exit(main())
