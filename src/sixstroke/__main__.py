from sixstroke.cli import main

raise SystemExit(main())
