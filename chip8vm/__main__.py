import sys

from chip8vm.cli import main

sys.exit(main())
