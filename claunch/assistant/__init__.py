"""Assistant CLI options and command construction."""
