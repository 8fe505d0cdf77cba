"""ha-ui — client for a remote energy-grid simulation backend."""
