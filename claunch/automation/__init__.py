"""GUI automation: step plans, the AppleScript backend and the script runner."""
