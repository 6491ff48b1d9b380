"""HTTP API for the pairswap exchange core."""
