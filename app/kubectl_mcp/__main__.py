import sys

from kubectl_mcp.cli import main

sys.exit(main())
