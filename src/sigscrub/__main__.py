from sigscrub.cli.main import main

raise SystemExit(main())
