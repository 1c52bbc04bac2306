from mcp_filesystem.cli import main

raise SystemExit(main())
