"""Installation detection for target applications and the assistant CLI."""
