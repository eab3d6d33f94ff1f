"""HTTP surface for the DEX client."""
