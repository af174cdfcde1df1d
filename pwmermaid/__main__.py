import sys

from pwmermaid.cli import main

sys.exit(main())
