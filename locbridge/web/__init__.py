"""HTTP API for locbridge."""
