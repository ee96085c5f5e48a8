"""Services for catalog access, preferences, recommendations and search."""
