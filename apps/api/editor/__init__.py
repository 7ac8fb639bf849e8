"""Client-side tier list editor state machine."""
