"""Web layer: contracts, services, controllers and per-session state."""
