"""trackbridge: reconcile imported playlists against a playback catalog."""
