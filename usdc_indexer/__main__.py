import sys

from usdc_indexer.cli import main

sys.exit(main())
