from divchain.cli import main

raise SystemExit(main())
