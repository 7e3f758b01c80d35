import sys

from avif_optimizer.presentation.cli import main

sys.exit(main())
