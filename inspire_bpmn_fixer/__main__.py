import sys

from inspire_bpmn_fixer.cli import main

sys.exit(main())
