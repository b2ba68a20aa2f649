from eduhub.main import main

raise SystemExit(main())
