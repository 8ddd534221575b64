"""Environment-backed level configuration provider."""
