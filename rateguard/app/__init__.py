"""rateguard application package."""
