"""Load benchmark and plotting tools for the best-model service."""
