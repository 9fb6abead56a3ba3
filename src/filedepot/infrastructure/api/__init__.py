"""HTTP API for FileDepot."""
