"""Per-shell table computation, memoization and batch scheduling."""
