"""Terminal frame rendering and syntax highlighting."""
