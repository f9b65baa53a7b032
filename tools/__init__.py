"""Development tooling: repository guard checks wired into the test suite."""
