from oictl.cli import main

raise SystemExit(main())
