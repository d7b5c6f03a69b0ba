"""HTTP remote-storage filesystem adapter."""
