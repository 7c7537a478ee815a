"""Terminal dashboard (Textual)."""
