import sys

from erc_indexer.cli import main

sys.exit(main())
