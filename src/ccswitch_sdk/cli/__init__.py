"""ccswitch command-line interface."""
