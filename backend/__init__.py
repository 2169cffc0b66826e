"""Backend API package."""
