"""Round flow, persisted word tallies and the end-of-game skill projection."""
