"""Device capability and command set."""
