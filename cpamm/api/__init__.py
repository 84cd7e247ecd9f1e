"""HTTP surface of the pair registry."""
