"""Runtime plumbing shared by the rule pipeline and the CLI."""
